"""Catalog rows returned by the entity repository."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Row(BaseModel):
    model_config = ConfigDict(frozen=True)


class PlayerRow(_Row):
    """A player candidate."""

    player_id: int
    first_name: str
    last_name: str
    nick_name: str | None = None
    card_count: int = 0
    is_hof: bool = False

    @property
    def full_name(self) -> str:
        """Display name, with the nickname quoted between first and last name."""
        if self.nick_name:
            return f'{self.first_name} "{self.nick_name}" {self.last_name}'
        return f"{self.first_name} {self.last_name}"


class TeamRow(_Row):
    """A team candidate, optionally with catalog counts."""

    team_id: int
    name: str
    city: str | None = None
    mascot: str | None = None
    abbreviation: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    player_count: int | None = None
    card_count: int | None = None


class SeriesRow(_Row):
    """A series (set release or insert/parallel subset)."""

    series_id: int
    series_name: str
    set_id: int | None = None
    set_name: str | None = None
    manufacturer_name: str | None = None
    year: int | None = None
    production_code: str | None = None
    card_count: int = 0
    is_base: bool = False
    parallel_of: int | None = None
    print_run_display: str | None = None
    color_id: int | None = None
    color_name: str | None = None
    color_hex: str | None = None


class ColorRow(_Row):
    """A color/finish used by parallel series."""

    color_id: int
    color_name: str
    hex_value: str | None = None


class CardRow(_Row):
    """A physical card with its series, set and player display fields."""

    card_id: int
    card_number: str
    series_id: int
    series_name: str
    set_name: str | None = None
    year: int | None = None
    manufacturer_name: str | None = None
    color_name: str | None = None
    color_hex: str | None = None
    player_names: str | None = None
    team_name: str | None = None
    team_abbreviation: str | None = None
    is_rookie: bool = False
    is_autograph: bool = False
    is_short_print: bool = False
    is_relic: bool = False
    print_run: int | None = None


class CardFilters(BaseModel):
    """AND-combined card filters handed to the repository."""

    player_ids: list[int] = Field(default_factory=list)
    team_ids: list[int] = Field(default_factory=list)
    series_ids: list[int] = Field(default_factory=list)
    insert_series_ids: list[int] = Field(default_factory=list)
    color_ids: list[int] = Field(default_factory=list)
    card_number: str | None = None
    year: int | None = None
    print_run: int | None = None
    rookie: bool | None = None
    autograph: bool | None = None
    short_print: bool | None = None
    relic: bool | None = None
    keyword: str | None = None
    exact_card_number_first: bool = False

    @property
    def is_empty(self) -> bool:
        """True when no filter narrows the card list."""
        return not any(
            (
                self.player_ids,
                self.team_ids,
                self.series_ids,
                self.insert_series_ids,
                self.color_ids,
                self.card_number,
                self.year is not None,
                self.print_run is not None,
                self.rookie,
                self.autograph,
                self.short_print,
                self.relic,
                self.keyword,
            )
        )
