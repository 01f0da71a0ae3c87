"""Persistent JSON config and rule-shape parsing.

The config file lives under the platform user-config directory. Reading is
defensive: a missing or malformed file yields defaults, and malformed rule
entries are dropped with a warning so the remaining rules still apply.

Accepted rule shapes::

    "TODO"                                   fragment rule, default tier
    ["BEGIN", "END"]                         block rule, default tier
    {"rule": "TODO", "tier": "max"}          fragment rule
    {"startRule": "BEGIN", "endRule": "END",
     "tier": "min", "maxLinesBetween": 5,
     "sameScope": true}                      block rule

Language sections such as ``"[python]"`` override top-level keys for
documents of that language.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .errors import ConfigurationShapeError, InvalidPatternError
from .patterns import compile_pattern
from .rules import BlockRule, FragmentRule, Rule, Tier

logger = logging.getLogger(__name__)

APP_NAME = "lowlight"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

DEFAULT_MAX_LINES_TO_SCAN = 1000
DEFAULT_OPACITIES: dict[Tier, float] = {Tier.MAX: 0.3, Tier.MID: 0.5, Tier.MIN: 0.7}
DEFAULT_TIER = Tier.MID

_OPACITY_KEYS: dict[Tier, str] = {
    Tier.MAX: "maxOpacity",
    Tier.MID: "midOpacity",
    Tier.MIN: "minOpacity",
}


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path if path is not None else CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object], path: Path | None = None) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored.
    """
    config_path = path if path is not None else CONFIG_PATH
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to write config %s: %s", config_path, exc)


def _parse_tier(entry: Mapping[str, object], default_tier: Tier) -> Tier:
    if "tier" not in entry:
        return default_tier
    tier = Tier.parse(entry["tier"])
    if tier is None:
        raise ConfigurationShapeError(entry, "unknown tier")
    return tier


def _parse_max_lines(entry: Mapping[str, object]) -> int | None:
    value = entry.get("maxLinesBetween")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationShapeError(entry, "maxLinesBetween must be a non-negative integer")
    return value


def parse_rule(entry: object, default_tier: Tier = DEFAULT_TIER) -> Rule:
    """Turn one config entry into a ``FragmentRule`` or ``BlockRule``.

    Raises ``ConfigurationShapeError`` for unrecognized shapes and
    ``InvalidPatternError`` for patterns that do not compile.
    """
    if isinstance(entry, str):
        return FragmentRule(pattern=compile_pattern(entry), tier=default_tier)

    if isinstance(entry, list):
        if len(entry) != 2:
            raise ConfigurationShapeError(entry, "pattern pair must have exactly two elements")
        start, end = entry
        return BlockRule(
            start_pattern=compile_pattern(start),
            end_pattern=compile_pattern(end),
            tier=default_tier,
        )

    if not isinstance(entry, dict):
        raise ConfigurationShapeError(entry)

    has_fragment = "rule" in entry
    has_block = "startRule" in entry or "endRule" in entry
    if has_fragment == has_block:
        raise ConfigurationShapeError(entry, "expected either 'rule' or 'startRule'/'endRule'")

    tier = _parse_tier(entry, default_tier)
    if has_fragment:
        return FragmentRule(pattern=compile_pattern(entry["rule"]), tier=tier)

    if "startRule" not in entry or "endRule" not in entry:
        raise ConfigurationShapeError(entry, "block rule needs both 'startRule' and 'endRule'")
    same_scope = entry.get("sameScope", False)
    if not isinstance(same_scope, bool):
        raise ConfigurationShapeError(entry, "sameScope must be a boolean")
    return BlockRule(
        start_pattern=compile_pattern(entry["startRule"]),
        end_pattern=compile_pattern(entry["endRule"]),
        tier=tier,
        max_lines_between=_parse_max_lines(entry),
        same_scope=same_scope,
    )


def parse_rules(entries: object, default_tier: Tier = DEFAULT_TIER) -> list[Rule]:
    """Parse a list of entries, dropping (and logging) each invalid one."""
    if entries is None:
        return []
    if not isinstance(entries, list):
        logger.warning("Ignoring 'rules': expected a list, got %s", type(entries).__name__)
        return []

    rules: list[Rule] = []
    for index, entry in enumerate(entries):
        try:
            rules.append(parse_rule(entry, default_tier))
        except (ConfigurationShapeError, InvalidPatternError) as exc:
            logger.warning("Dropping rule #%d: %s", index, exc)
    return rules


def _coerce_nonnegative_int(value: object, default: int) -> int:
    """Booleans and non-integers are invalid and fall back to ``default``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return max(0, value)


def _coerce_opacity(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return max(0.0, min(1.0, float(value)))


def _language_section(data: Mapping[str, object], language: str | None) -> dict[str, object]:
    """Overlay ``"[language]"`` keys on top of the top-level ones."""
    merged = {key: value for key, value in data.items() if not key.startswith("[")}
    if language:
        section = data.get(f"[{language}]")
        if isinstance(section, dict):
            merged.update(section)
    return merged


@dataclass(frozen=True)
class LowlightConfig:
    """Parsed, immutable configuration for one document language."""

    rules: tuple[Rule, ...] = ()
    max_lines_to_scan: int = DEFAULT_MAX_LINES_TO_SCAN
    opacities: dict[Tier, float] = field(default_factory=lambda: dict(DEFAULT_OPACITIES))
    default_tier: Tier = DEFAULT_TIER

    @classmethod
    def from_mapping(cls, data: Mapping[str, object], language: str | None = None) -> LowlightConfig:
        """Build a config from decoded JSON, applying the language section."""
        merged = _language_section(data, language)

        default_tier = DEFAULT_TIER
        if "defaultTier" in merged:
            parsed_tier = Tier.parse(merged["defaultTier"])
            if parsed_tier is None:
                logger.warning("Ignoring unknown defaultTier %r", merged["defaultTier"])
            else:
                default_tier = parsed_tier

        opacities = {
            tier: _coerce_opacity(merged.get(key), DEFAULT_OPACITIES[tier])
            for tier, key in _OPACITY_KEYS.items()
        }
        return cls(
            rules=tuple(parse_rules(merged.get("rules"), default_tier)),
            max_lines_to_scan=_coerce_nonnegative_int(
                merged.get("maxNumberOfLinesToScan"),
                DEFAULT_MAX_LINES_TO_SCAN,
            ),
            opacities=opacities,
            default_tier=default_tier,
        )


def load_lowlight_config(path: Path | None = None, language: str | None = None) -> LowlightConfig:
    """Load and parse the config file for documents of ``language``."""
    return LowlightConfig.from_mapping(load_config(path), language)
