"""
Configuration system for element ordering

A configuration file holds one or more ordering profiles. Each profile
carries the sort spec, the ordered groups list, custom groups, partitioning
toggles, spacing settings and optional guards that decide whether the
profile applies to a given construct. Everything is validated while loading;
evaluation never sees an invalid configuration.
"""

import json
import logging
import os
import re
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from .collation import resolve_locale
from .element import (
    ALL_MODIFIERS,
    ALL_SELECTORS,
    UNKNOWN_GROUP,
    parse_group_name,
)
from .errors import ConfigurationError
from .patterns import PatternSet, compile_optional

logger = logging.getLogger(__name__)

IGNORE = "ignore"

SORT_TYPES = ("alphabetical", "natural", "line-length", "custom-alphabet", "unsorted")
SUBGROUP_ORDER = "subgroup-order"
TYPE_ALIASES = {"custom": "custom-alphabet"}
ORDERS = ("asc", "desc")
SPECIAL_CHARACTERS = ("keep", "trim", "remove")

Spacing = int | str


def _camel_to_snake(key: str) -> str:
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", key).lower()


def normalize_keys(data: Any) -> Any:
    """Recursively convert camelCase mapping keys to snake_case."""
    if isinstance(data, dict):
        return {
            (_camel_to_snake(key) if isinstance(key, str) else key): normalize_keys(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [normalize_keys(item) for item in data]
    return data


def parse_spacing(value: Any, option: str) -> Spacing:
    """Validate a spacing value: a non-negative integer or ``"ignore"``"""
    if value == IGNORE:
        return IGNORE
    # Legacy keywords from older configurations
    if value == "always":
        return 1
    if value == "never":
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(
            f"Invalid {option}: {value!r} (expected a non-negative integer or 'ignore')"
        )
    return value


def _normalize_type(value: Any, allow_subgroup_order: bool = False) -> str:
    sort_type = TYPE_ALIASES.get(value, value)
    allowed = SORT_TYPES + ((SUBGROUP_ORDER,) if allow_subgroup_order else ())
    if sort_type not in allowed:
        raise ConfigurationError(f"Invalid sort type: {value!r}")
    return sort_type


def _normalize_order(value: Any) -> str:
    if value not in ORDERS:
        raise ConfigurationError(f"Invalid sort order: {value!r}")
    return value


# ============================================================
# SORT SPEC
# ============================================================


@dataclass(frozen=True)
class SortOverride:
    """Partial sort spec used for fallbacks and per-group overrides."""

    type: str | None = None
    order: str | None = None
    fallback_sort: "SortOverride | None" = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], allow_subgroup_order: bool) -> "SortOverride":
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid sort override: {data!r}")
        fallback = data.get("fallback_sort")
        return cls(
            type=(
                _normalize_type(data["type"], allow_subgroup_order)
                if data.get("type") is not None
                else None
            ),
            order=_normalize_order(data["order"]) if data.get("order") is not None else None,
            fallback_sort=(
                cls.from_dict(fallback, allow_subgroup_order=True)
                if fallback is not None
                else None
            ),
        )

    def merged_over(self, other: "SortOverride | None") -> "SortOverride":
        """Fill unset fields of this override from ``other``"""
        if other is None:
            return self
        return SortOverride(
            type=self.type or other.type,
            order=self.order or other.order,
            fallback_sort=self.fallback_sort or other.fallback_sort,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.type:
            data["type"] = self.type
        if self.order:
            data["order"] = self.order
        if self.fallback_sort:
            data["fallback_sort"] = self.fallback_sort.to_dict()
        return data


@dataclass(frozen=True)
class SortSpec:
    """How elements sharing a group tier are compared"""

    type: str = "alphabetical"
    order: str = "asc"
    locale: str | None = None
    ignore_case: bool = True
    special_characters: str = "keep"
    alphabet: str = ""
    fallback_sort: SortOverride | None = None

    def with_override(self, override: SortOverride | None) -> "SortSpec":
        """Apply a tier or custom-group override"""
        if override is None:
            return self
        return replace(
            self,
            type=override.type or self.type,
            order=override.order or self.order,
            fallback_sort=(
                override.fallback_sort.merged_over(self.fallback_sort)
                if override.fallback_sort
                else self.fallback_sort
            ),
        )

    def fallback(self) -> "SortSpec | None":
        """The spec applied on ties, or None"""
        if self.fallback_sort is None or self.fallback_sort.type is None:
            return None
        return replace(
            self,
            type=self.fallback_sort.type,
            order=self.fallback_sort.order or self.order,
            fallback_sort=self.fallback_sort.fallback_sort,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["fallback_sort"] = self.fallback_sort.to_dict() if self.fallback_sort else None
        return data


# ============================================================
# GROUPS
# ============================================================


@dataclass(frozen=True)
class GroupTier:
    """One entry of the groups list: a label or co-equal labels."""

    labels: tuple[str, ...]
    overrides: SortOverride | None = None
    newlines_inside: Spacing | None = None

    @property
    def name(self) -> str:
        return self.labels[0] if len(self.labels) == 1 else "|".join(self.labels)

    def to_option(self) -> Any:
        labels: Any = self.labels[0] if len(self.labels) == 1 else list(self.labels)
        if self.overrides is None and self.newlines_inside is None:
            return labels
        data: dict[str, Any] = {"group": labels}
        if self.overrides:
            data.update(self.overrides.to_dict())
        if self.newlines_inside is not None:
            data["newlines_inside"] = self.newlines_inside
        return data


@dataclass(frozen=True)
class NewlinesDirective:
    """Inline spacing directive placed between two tiers"""

    newlines_between: Spacing


@dataclass(frozen=True)
class GroupPredicate:
    """Conjunction of element constraints used by a custom group"""

    selector: str | None = None
    modifiers: frozenset[str] = frozenset()
    element_name_pattern: PatternSet | None = None
    element_value_pattern: PatternSet | None = None
    decorator_name_pattern: PatternSet | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GroupPredicate":
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid custom group predicate: {data!r}")
        selector = data.get("selector")
        if selector is not None and selector not in ALL_SELECTORS:
            raise ConfigurationError(f"Invalid selector in custom group: {selector!r}")
        raw_modifiers = data.get("modifiers") or ()
        if not isinstance(raw_modifiers, (list, tuple)):
            raise ConfigurationError(
                f"'modifiers' of a custom group must be a list: {raw_modifiers!r}"
            )
        modifiers = frozenset(raw_modifiers)
        unknown = modifiers - ALL_MODIFIERS
        if unknown:
            raise ConfigurationError(
                f"Invalid modifier(s) in custom group: {', '.join(sorted(unknown))}"
            )
        return cls(
            selector=selector,
            modifiers=modifiers,
            element_name_pattern=compile_optional(data.get("element_name_pattern")),
            element_value_pattern=compile_optional(data.get("element_value_pattern")),
            decorator_name_pattern=compile_optional(data.get("decorator_name_pattern")),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.selector:
            data["selector"] = self.selector
        if self.modifiers:
            data["modifiers"] = sorted(self.modifiers)
        for key in ("element_name_pattern", "element_value_pattern", "decorator_name_pattern"):
            pattern = getattr(self, key)
            if pattern is not None:
                data[key] = pattern.to_option()
        return data


@dataclass(frozen=True)
class CustomGroupRule:
    """User-declared group: a predicate (or any-of predicates) and a name"""

    group_name: str
    predicates: tuple[GroupPredicate, ...]
    any_of: bool = False
    overrides: SortOverride | None = None
    newlines_inside: Spacing | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomGroupRule":
        if not isinstance(data, dict) or not data.get("group_name"):
            raise ConfigurationError(f"Custom group without group_name: {data!r}")
        if "any_of" in data:
            if not isinstance(data["any_of"], list):
                raise ConfigurationError(
                    f"any_of of custom group {data['group_name']!r} must be a list"
                )
            predicates = tuple(GroupPredicate.from_dict(item) for item in data["any_of"])
            any_of = True
        else:
            predicates = (GroupPredicate.from_dict(data),)
            any_of = False

        overrides = SortOverride.from_dict(
            {key: data.get(key) for key in ("type", "order", "fallback_sort")},
            allow_subgroup_order=False,
        )
        newlines_inside = data.get("newlines_inside")
        return cls(
            group_name=data["group_name"],
            predicates=predicates,
            any_of=any_of,
            overrides=overrides if overrides != SortOverride() else None,
            newlines_inside=(
                parse_spacing(newlines_inside, "newlines_inside")
                if newlines_inside is not None
                else None
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"group_name": self.group_name}
        if self.any_of:
            data["any_of"] = [predicate.to_dict() for predicate in self.predicates]
        else:
            data.update(self.predicates[0].to_dict())
        if self.overrides:
            data.update(self.overrides.to_dict())
        if self.newlines_inside is not None:
            data["newlines_inside"] = self.newlines_inside
        return data


# ============================================================
# PARTITIONS AND GUARDS
# ============================================================


@dataclass(frozen=True)
class CommentPartition:
    """Per comment-kind partition settings"""

    line: bool | PatternSet = False
    block: bool | PatternSet = False


def _parse_comment_option(value: Any) -> bool | PatternSet:
    if isinstance(value, bool):
        return value
    return PatternSet.compile(value)


def _comment_option_to_dict(value: bool | PatternSet) -> Any:
    return value if isinstance(value, bool) else value.to_option()


@dataclass(frozen=True)
class ConfigurationGuard:
    """Conditions under which a profile applies"""

    all_names_match_pattern: PatternSet | None = None
    declaration_matches_pattern: PatternSet | None = None

    def accepts(self, names: list[str], construct_name: str | None) -> bool:
        if self.all_names_match_pattern and not all(
            self.all_names_match_pattern.matches(name) for name in names
        ):
            return False
        if self.declaration_matches_pattern and not (
            construct_name is not None
            and self.declaration_matches_pattern.matches(construct_name)
        ):
            return False
        return True


# ============================================================
# PROFILE
# ============================================================


@dataclass(frozen=True)
class SortingConfig:
    """One ordering profile"""

    sort: SortSpec = field(default_factory=SortSpec)
    groups: tuple[GroupTier | NewlinesDirective, ...] = ()
    custom_groups: tuple[CustomGroupRule, ...] = ()
    partition_by_comment: bool | PatternSet | CommentPartition = False
    partition_by_new_line: bool | int = False
    newlines_between: Spacing = IGNORE
    newlines_inside: Spacing = IGNORE
    ignore_callback_dependencies_patterns: PatternSet | None = None
    use_configuration_if: ConfigurationGuard | None = None
    name: str | None = None

    @property
    def tiers(self) -> tuple[GroupTier, ...]:
        return tuple(entry for entry in self.groups if isinstance(entry, GroupTier))

    @property
    def directives(self) -> dict[int, Spacing]:
        """Inline spacing directives keyed by boundary.

        Boundary ``k`` sits between tier ``k`` and tier ``k + 1``.
        """
        result = {}
        tier_index = -1
        for entry in self.groups:
            if isinstance(entry, GroupTier):
                tier_index += 1
            elif tier_index >= 0:
                result[tier_index] = entry.newlines_between
        return result

    @property
    def group_names(self) -> list[str]:
        return [label for tier in self.tiers for label in tier.labels]

    def custom_group(self, name: str) -> CustomGroupRule | None:
        for rule in self.custom_groups:
            if rule.group_name == name:
                return rule
        return None

    def applies_to(self, names: list[str], construct_name: str | None) -> bool:
        return self.use_configuration_if is None or self.use_configuration_if.accepts(
            names, construct_name
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SortingConfig":
        """Build and validate a profile from a (snake_case) mapping.

        Raises:
            ConfigurationError: If any option is invalid
        """
        data = normalize_keys(data or {})
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid profile: {data!r}")

        locale_name = data.get("locale", data.get("locales"))
        if isinstance(locale_name, list):
            locale_name = locale_name[0] if locale_name else None
        special_characters = data.get("special_characters", "keep")
        if special_characters not in SPECIAL_CHARACTERS:
            raise ConfigurationError(f"Invalid special_characters: {special_characters!r}")
        ignore_case = data.get("ignore_case", True)
        if not isinstance(ignore_case, bool):
            raise ConfigurationError(f"Invalid ignore_case: {ignore_case!r}")
        alphabet = data.get("alphabet") or ""
        if not isinstance(alphabet, str):
            raise ConfigurationError(f"Invalid alphabet: {alphabet!r}")
        fallback = data.get("fallback_sort")
        sort = SortSpec(
            type=_normalize_type(data.get("type", "alphabetical")),
            order=_normalize_order(data.get("order", "asc")),
            locale=locale_name,
            ignore_case=ignore_case,
            special_characters=special_characters,
            alphabet=alphabet,
            fallback_sort=(
                SortOverride.from_dict(fallback, allow_subgroup_order=True)
                if fallback is not None
                else None
            ),
        )

        groups = tuple(
            _parse_group_entry(entry) for entry in _list_option(data, "groups")
        )
        custom_groups = tuple(
            CustomGroupRule.from_dict(item) for item in _list_option(data, "custom_groups")
        )

        partition_by_comment = data.get("partition_by_comment", False)
        if isinstance(partition_by_comment, dict) and "pattern" not in partition_by_comment:
            partition_by_comment = CommentPartition(
                line=_parse_comment_option(partition_by_comment.get("line", False)),
                block=_parse_comment_option(partition_by_comment.get("block", False)),
            )
        else:
            partition_by_comment = _parse_comment_option(partition_by_comment)

        partition_by_new_line = data.get("partition_by_new_line", False)
        if not isinstance(partition_by_new_line, (bool, int)) or (
            not isinstance(partition_by_new_line, bool) and partition_by_new_line < 1
        ):
            raise ConfigurationError(
                f"Invalid partition_by_new_line: {partition_by_new_line!r}"
            )

        guard_data = data.get("use_configuration_if")
        guard = None
        if guard_data is not None and not isinstance(guard_data, dict):
            raise ConfigurationError(f"Invalid use_configuration_if: {guard_data!r}")
        if guard_data:
            guard = ConfigurationGuard(
                all_names_match_pattern=compile_optional(
                    guard_data.get("all_names_match_pattern")
                ),
                declaration_matches_pattern=compile_optional(
                    guard_data.get("declaration_matches_pattern")
                ),
            )

        config = cls(
            sort=sort,
            groups=groups,
            custom_groups=custom_groups,
            partition_by_comment=partition_by_comment,
            partition_by_new_line=partition_by_new_line,
            newlines_between=parse_spacing(
                data.get("newlines_between", IGNORE), "newlines_between"
            ),
            newlines_inside=parse_spacing(
                data.get("newlines_inside", IGNORE), "newlines_inside"
            ),
            ignore_callback_dependencies_patterns=compile_optional(
                data.get("ignore_callback_dependencies_patterns")
            ),
            use_configuration_if=guard,
            name=data.get("name"),
        )

        errors = config.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))
        return config

    def validate(self) -> list[str]:
        """Validate cross-option constraints and return list of errors"""
        errors = []

        # Group names
        custom_names = {rule.group_name for rule in self.custom_groups}
        seen: set[str] = set()
        duplicated: list[str] = []
        invalid: list[str] = []
        for label in self.group_names:
            if label in seen and label not in duplicated:
                duplicated.append(label)
            seen.add(label)
            if (
                label != UNKNOWN_GROUP
                and label not in custom_names
                and parse_group_name(label) is None
            ):
                invalid.append(label)
        if invalid:
            errors.append(f"Invalid group(s): {', '.join(invalid)}")
        if duplicated:
            errors.append(f"Duplicated group(s): {', '.join(duplicated)}")

        # Inline directives
        previous_was_directive = False
        for entry in self.groups:
            is_directive = isinstance(entry, NewlinesDirective)
            if is_directive and previous_was_directive:
                errors.append("Consecutive 'newlines_between' objects are not allowed")
                break
            previous_was_directive = is_directive

        # Custom alphabet
        uses_custom = "custom-alphabet" in self._sort_types()
        if uses_custom and not self.sort.alphabet:
            errors.append("`alphabet` option must not be empty")

        # Locale
        if self.sort.locale and resolve_locale(self.sort.locale) is None:
            errors.append(f"Locale is not available: {self.sort.locale}")

        # Partitioning by new line owns blank lines
        if self.partition_by_new_line:
            if self.newlines_between != IGNORE:
                errors.append(
                    "The 'partition_by_new_line' and 'newlines_between' options "
                    "cannot be used together"
                )
            if any(isinstance(entry, NewlinesDirective) for entry in self.groups):
                errors.append(
                    "'newlines_between' objects can not be used in 'groups' "
                    "alongside 'partition_by_new_line'"
                )

        return errors

    def _sort_types(self) -> set[str]:
        """Every sort type a profile can apply, fallback chains included"""
        overrides = [self.sort.fallback_sort]
        overrides += [tier.overrides for tier in self.tiers]
        overrides += [rule.overrides for rule in self.custom_groups]

        types = {self.sort.type}
        for override in overrides:
            while override is not None:
                if override.type:
                    types.add(override.type)
                override = override.fallback_sort
        return types

    def to_dict(self) -> dict[str, Any]:
        """Convert profile to a (snake_case) mapping"""
        groups: list[Any] = []
        for entry in self.groups:
            if isinstance(entry, NewlinesDirective):
                groups.append({"newlines_between": entry.newlines_between})
            else:
                groups.append(entry.to_option())

        if isinstance(self.partition_by_comment, CommentPartition):
            partition_by_comment: Any = {
                "line": _comment_option_to_dict(self.partition_by_comment.line),
                "block": _comment_option_to_dict(self.partition_by_comment.block),
            }
        else:
            partition_by_comment = _comment_option_to_dict(self.partition_by_comment)

        data: dict[str, Any] = {
            **{key: value for key, value in self.sort.to_dict().items() if value is not None},
            "groups": groups,
            "custom_groups": [rule.to_dict() for rule in self.custom_groups],
            "partition_by_comment": partition_by_comment,
            "partition_by_new_line": self.partition_by_new_line,
            "newlines_between": self.newlines_between,
            "newlines_inside": self.newlines_inside,
        }
        if self.ignore_callback_dependencies_patterns:
            data["ignore_callback_dependencies_patterns"] = (
                self.ignore_callback_dependencies_patterns.to_option()
            )
        if self.use_configuration_if:
            guard = {}
            if self.use_configuration_if.all_names_match_pattern:
                guard["all_names_match_pattern"] = (
                    self.use_configuration_if.all_names_match_pattern.to_option()
                )
            if self.use_configuration_if.declaration_matches_pattern:
                guard["declaration_matches_pattern"] = (
                    self.use_configuration_if.declaration_matches_pattern.to_option()
                )
            data["use_configuration_if"] = guard
        if self.name:
            data["name"] = self.name
        return data


def _list_option(data: dict[str, Any], option: str) -> list[Any]:
    value = data.get(option)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigurationError(f"'{option}' must be a list: {value!r}")
    return value


def _parse_group_entry(entry: Any) -> GroupTier | NewlinesDirective:
    if isinstance(entry, str):
        return GroupTier(labels=(entry,))
    if isinstance(entry, list):
        if not entry or not all(isinstance(label, str) for label in entry):
            raise ConfigurationError(f"Invalid group tier: {entry!r}")
        return GroupTier(labels=tuple(entry))
    if isinstance(entry, dict):
        if "newlines_between" in entry and "group" not in entry:
            return NewlinesDirective(
                newlines_between=parse_spacing(entry["newlines_between"], "newlines_between")
            )
        if "group" in entry:
            tier = _parse_group_entry(entry["group"])
            if not isinstance(tier, GroupTier):
                raise ConfigurationError(f"Invalid group tier: {entry!r}")
            overrides = SortOverride.from_dict(
                {key: entry.get(key) for key in ("type", "order", "fallback_sort")},
                allow_subgroup_order=False,
            )
            newlines_inside = entry.get("newlines_inside")
            return GroupTier(
                labels=tier.labels,
                overrides=overrides if overrides != SortOverride() else None,
                newlines_inside=(
                    parse_spacing(newlines_inside, "newlines_inside")
                    if newlines_inside is not None
                    else None
                ),
            )
    raise ConfigurationError(f"Invalid groups entry: {entry!r}")


# ============================================================
# TOP-LEVEL CONFIG
# ============================================================


@dataclass
class Config:
    """Main configuration class: ordered profiles plus CLI settings"""

    profiles: list[SortingConfig] = field(default_factory=lambda: [SortingConfig()])
    verbose: bool = False
    quiet: bool = False

    # File paths
    config_file: str | None = None

    @classmethod
    def from_file(cls, filepath: Path) -> "Config":
        """Load configuration from YAML or JSON file

        Raises:
            ConfigurationError: On unsupported format or invalid contents
        """
        if not filepath.exists():
            logger.warning(f"Config file not found: {filepath}")
            return cls()

        with open(filepath, "r", encoding="utf-8") as f:
            try:
                if filepath.suffix in [".yaml", ".yml"]:
                    data = yaml.safe_load(f)
                elif filepath.suffix == ".json":
                    data = json.load(f)
                else:
                    raise ConfigurationError(
                        f"Unsupported config file format: {filepath.suffix}"
                    )
            except (yaml.YAMLError, json.JSONDecodeError) as e:
                raise ConfigurationError(f"Error loading config file {filepath}: {e}") from e

        config = cls.from_dict(data or {})
        config.config_file = str(filepath)
        logger.debug(f"Loaded {len(config.profiles)} profile(s) from {filepath}")
        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config instance from dictionary"""
        data = normalize_keys(data)
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid configuration: {data!r}")
        config = cls()

        for key in ["verbose", "quiet"]:
            if key in data:
                setattr(config, key, bool(data[key]))

        if "profiles" in data:
            profiles = data["profiles"]
            if not isinstance(profiles, list) or not profiles:
                raise ConfigurationError("'profiles' must be a non-empty list")
            config.profiles = [SortingConfig.from_dict(profile) for profile in profiles]
        else:
            profile = {
                key: value for key, value in data.items() if key not in ("verbose", "quiet")
            }
            config.profiles = [SortingConfig.from_dict(profile)]

        return config

    @classmethod
    def load_hierarchy(cls, project_dir: Path | None = None) -> "Config":
        """Load configuration from hierarchy: global -> project -> env vars"""
        config = cls()

        # 1. Load global config
        global_config = Path.home() / ".element-ordering" / "config.yaml"
        if global_config.exists():
            config = cls.from_file(global_config)
            logger.debug(f"Loaded global config from {global_config}")

        # 2. Load project config
        if project_dir:
            project_config = project_dir / ".element-ordering.yaml"
            if project_config.exists():
                config.merge(cls.from_file(project_config))
                logger.debug(f"Loaded project config from {project_config}")

        # 3. Apply environment variables
        config.apply_env_vars()

        return config

    def merge(self, other: "Config") -> None:
        """Merge another config into this one (other takes precedence)"""
        if other.profiles != [SortingConfig()]:
            self.profiles = list(other.profiles)
        if other.config_file:
            self.config_file = other.config_file
        for flag in ["verbose", "quiet"]:
            if getattr(other, flag):
                setattr(self, flag, True)

    def apply_env_vars(self) -> None:
        """Apply environment variables to configuration"""
        sort_type = os.environ.get("ELEMENT_ORDERING_TYPE")
        order = os.environ.get("ELEMENT_ORDERING_ORDER")
        if sort_type or order:
            updated = []
            for profile in self.profiles:
                sort = replace(
                    profile.sort,
                    type=_normalize_type(sort_type) if sort_type else profile.sort.type,
                    order=_normalize_order(order) if order else profile.sort.order,
                )
                updated.append(replace(profile, sort=sort))
            self.profiles = updated

        if os.environ.get("ELEMENT_ORDERING_VERBOSE", "").lower() in ["true", "1", "yes"]:
            self.verbose = True

    def select_profile(
        self,
        names: list[str],
        construct_name: str | None = None,
    ) -> SortingConfig:
        """Return the first profile whose guards accept the construct.

        Falls back to the default profile when no profile applies.
        """
        for profile in self.profiles:
            if profile.applies_to(names, construct_name):
                return profile
        logger.debug(f"No profile applies to {construct_name or 'construct'}, using defaults")
        return SortingConfig()

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "verbose": self.verbose,
            "quiet": self.quiet,
            "profiles": [profile.to_dict() for profile in self.profiles],
        }

    def save(self, filepath: Path) -> None:
        """Save configuration to file"""
        data = self.to_dict()

        with open(filepath, "w", encoding="utf-8") as f:
            if filepath.suffix in [".yaml", ".yml"]:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            elif filepath.suffix == ".json":
                json.dump(data, f, indent=2)
            else:
                raise ConfigurationError(f"Unsupported config file format: {filepath.suffix}")
