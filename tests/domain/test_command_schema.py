"""Tests for the declarative command tables and coercion functions."""

import pytest

from prodtimer.domain.command_schema import (
    ALL_COMMANDS,
    COMMAND_ALIASES,
    COMMAND_SCHEMAS,
    ArgumentSpec,
    CommandName,
    CommandSchema,
    OptionSpec,
    OptionType,
    to_days_or_date,
    to_name,
    to_number,
    to_unit,
)


class TestTables:
    def test_every_command_has_a_schema(self) -> None:
        assert set(COMMAND_SCHEMAS) == set(CommandName)

    def test_aliases_point_to_known_commands(self) -> None:
        assert all(target in ALL_COMMANDS for target in COMMAND_ALIASES.values())

    def test_aliases_are_unique(self) -> None:
        assert len(set(COMMAND_ALIASES)) == len(COMMAND_ALIASES)

    def test_create_and_save_share_options(self) -> None:
        create = COMMAND_SCHEMAS[CommandName.CREATE]
        save = COMMAND_SCHEMAS[CommandName.SAVE]
        assert set(create.options) == {"name", "duration", "unit", "description"}
        assert create.options == save.options
        assert create.options["unit"].default == "m"

    def test_start_takes_one_optional_argument(self) -> None:
        spec = COMMAND_SCHEMAS[CommandName.START].arguments
        assert spec is not None
        assert (spec.count, spec.required) == (1, 0)

    def test_delete_requires_one_argument(self) -> None:
        spec = COMMAND_SCHEMAS[CommandName.DELETE_SAVED_TIMER].arguments
        assert spec is not None
        assert spec.required == 1


class TestCommandSchemaInvariants:
    def test_alias_to_undeclared_option_rejected(self) -> None:
        with pytest.raises(ValueError, match="undeclared option"):
            CommandSchema(
                options={"name": OptionSpec(type=OptionType.STRING)},
                option_aliases={"x": "missing"},
            )

    def test_alias_to_declared_option_accepted(self) -> None:
        schema = CommandSchema(
            options={"name": OptionSpec(type=OptionType.STRING)},
            option_aliases={"n": "name"},
        )
        assert schema.option_aliases == {"n": "name"}

    @pytest.mark.parametrize(("count", "optional"), [(0, 0), (1, 2), (2, -1)])
    def test_bad_arity_rejected(self, count: int, optional: int) -> None:
        with pytest.raises(ValueError, match="arity"):
            ArgumentSpec(count=count, optional=optional)


class TestCoercers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("20", 20), ("2.5", 2.5), ("3.0", 3), (7, 7), (1.5, 1.5), (" 4 ", 4)],
    )
    def test_to_number(self, value: object, expected: float) -> None:
        result = to_number(value)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize("value", ["twenty", "", "nan", "inf", True])
    def test_to_number_rejects(self, value: object) -> None:
        with pytest.raises(ValueError):
            to_number(value)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("m", "m"), ("MIN", "m"), ("sec", "s"), ("hr", "h"), ("ms", "ms")],
    )
    def test_to_unit(self, value: str, expected: str) -> None:
        assert to_unit(value) == expected

    def test_to_unit_rejects(self) -> None:
        with pytest.raises(ValueError, match="Unknown duration unit"):
            to_unit("days")

    def test_to_name_strips(self) -> None:
        assert to_name("  coding ") == "coding"

    def test_to_name_rejects_blank(self) -> None:
        with pytest.raises(ValueError):
            to_name("   ")

    def test_to_days_or_date(self) -> None:
        assert to_days_or_date("2") == 2
        assert to_days_or_date("03-14-2026") == "03-14-2026"
        assert to_days_or_date("-1") == "-1"
