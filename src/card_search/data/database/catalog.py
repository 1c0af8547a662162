"""SQLite card catalog implementing the entity repository.

Name lookups are case-insensitive substring matches (LIKE) that also ignore
apostrophes in player names. Phonetic lookups use a soundex() SQL function
registered on the connection by configure_connection().
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import aiosqlite

from ...utils.text import soundex
from ..models import CardFilters, CardRow, ColorRow, PlayerRow, SeriesRow, TeamRow
from .base import BaseDatabase
from .query import QueryBuilder, contains_pattern

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS manufacturer (
    manufacturer_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS card_set (
    set_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    year INTEGER,
    manufacturer_id INTEGER REFERENCES manufacturer(manufacturer_id)
);

CREATE TABLE IF NOT EXISTS color (
    color_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    hex_value TEXT
);

CREATE TABLE IF NOT EXISTS series (
    series_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    set_id INTEGER NOT NULL REFERENCES card_set(set_id),
    color_id INTEGER REFERENCES color(color_id),
    production_code TEXT,
    card_count INTEGER NOT NULL DEFAULT 0,
    is_base INTEGER NOT NULL DEFAULT 0,
    parallel_of_series INTEGER REFERENCES series(series_id),
    print_run_display TEXT
);

CREATE TABLE IF NOT EXISTS team (
    team_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    city TEXT,
    mascot TEXT,
    abbreviation TEXT,
    primary_color TEXT,
    secondary_color TEXT
);

CREATE TABLE IF NOT EXISTS player (
    player_id INTEGER PRIMARY KEY,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    nick_name TEXT,
    card_count INTEGER NOT NULL DEFAULT 0,
    is_hof INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS player_team (
    player_team_id INTEGER PRIMARY KEY,
    player_id INTEGER NOT NULL REFERENCES player(player_id),
    team_id INTEGER NOT NULL REFERENCES team(team_id)
);

CREATE TABLE IF NOT EXISTS card (
    card_id INTEGER PRIMARY KEY,
    card_number TEXT NOT NULL,
    series_id INTEGER NOT NULL REFERENCES series(series_id),
    is_rookie INTEGER NOT NULL DEFAULT 0,
    is_autograph INTEGER NOT NULL DEFAULT 0,
    is_short_print INTEGER NOT NULL DEFAULT 0,
    is_relic INTEGER NOT NULL DEFAULT 0,
    print_run INTEGER
);

CREATE TABLE IF NOT EXISTS card_player_team (
    card_id INTEGER NOT NULL REFERENCES card(card_id),
    player_team_id INTEGER NOT NULL REFERENCES player_team(player_team_id),
    PRIMARY KEY (card_id, player_team_id)
);

CREATE INDEX IF NOT EXISTS idx_card_series ON card(series_id);
CREATE INDEX IF NOT EXISTS idx_card_number ON card(card_number);
CREATE INDEX IF NOT EXISTS idx_series_set ON series(set_id);
CREATE INDEX IF NOT EXISTS idx_series_production_code ON series(production_code);
CREATE INDEX IF NOT EXISTS idx_player_team_player ON player_team(player_id);
CREATE INDEX IF NOT EXISTS idx_player_team_team ON player_team(team_id);
CREATE INDEX IF NOT EXISTS idx_cpt_player_team ON card_player_team(player_team_id);
"""

# Row limits per lookup
PLAYER_LOOKUP_LIMIT = 10
TEAM_LOOKUP_LIMIT = 5
SERIES_LOOKUP_LIMIT = 5
INSERT_LOOKUP_LIMIT = 10
COLOR_LOOKUP_LIMIT = 5

_ESC = "ESCAPE '\\'"

_PLAYER_COLUMNS = "player_id, first_name, last_name, nick_name, card_count, is_hof"

_SERIES_SELECT = """
    SELECT
        s.series_id,
        s.name AS series_name,
        st.set_id,
        st.name AS set_name,
        m.name AS manufacturer_name,
        st.year,
        s.production_code,
        s.card_count,
        s.is_base,
        s.parallel_of_series,
        s.print_run_display,
        col.color_id,
        col.name AS color_name,
        col.hex_value AS color_hex
    FROM series s
    JOIN card_set st ON s.set_id = st.set_id
    LEFT JOIN manufacturer m ON st.manufacturer_id = m.manufacturer_id
    LEFT JOIN color col ON s.color_id = col.color_id
"""

_CARD_PLAYERS = """
    FROM card_player_team cpt
    JOIN player_team pt ON cpt.player_team_id = pt.player_team_id
"""

_CARD_SELECT = f"""
    SELECT
        c.card_id,
        c.card_number,
        c.is_rookie,
        c.is_autograph,
        c.is_short_print,
        c.is_relic,
        c.print_run,
        s.series_id,
        s.name AS series_name,
        st.name AS set_name,
        st.year,
        m.name AS manufacturer_name,
        col.name AS color_name,
        col.hex_value AS color_hex,
        (SELECT GROUP_CONCAT(p.first_name || ' ' || p.last_name, ', ')
         {_CARD_PLAYERS}
         JOIN player p ON pt.player_id = p.player_id
         WHERE cpt.card_id = c.card_id) AS player_names,
        (SELECT MAX(p.card_count)
         {_CARD_PLAYERS}
         JOIN player p ON pt.player_id = p.player_id
         WHERE cpt.card_id = c.card_id) AS popularity,
        (SELECT t.name
         {_CARD_PLAYERS}
         JOIN team t ON pt.team_id = t.team_id
         WHERE cpt.card_id = c.card_id
         ORDER BY t.team_id LIMIT 1) AS team_name,
        (SELECT t.abbreviation
         {_CARD_PLAYERS}
         JOIN team t ON pt.team_id = t.team_id
         WHERE cpt.card_id = c.card_id
         ORDER BY t.team_id LIMIT 1) AS team_abbreviation
    FROM card c
    JOIN series s ON c.series_id = s.series_id
    JOIN card_set st ON s.set_id = st.set_id
    LEFT JOIN manufacturer m ON st.manufacturer_id = m.manufacturer_id
    LEFT JOIN color col ON s.color_id = col.color_id
"""


async def configure_connection(conn: aiosqlite.Connection) -> None:
    """Set the row factory and register SQL helper functions on a connection."""
    conn.row_factory = aiosqlite.Row
    await conn.create_function("soundex", 1, soundex)


async def create_schema(conn: aiosqlite.Connection) -> None:
    """Create catalog tables if they do not exist."""
    await conn.executescript(SCHEMA_SQL)
    await conn.commit()


def _placeholders(values: Sequence[object]) -> str:
    return ", ".join("?" for _ in values)


class CatalogDatabase(BaseDatabase):
    """Read-only catalog lookups for players, teams, series, colors and cards."""

    # -------------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------------

    @staticmethod
    def _row_to_player(row: aiosqlite.Row) -> PlayerRow:
        return PlayerRow(
            player_id=row["player_id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            nick_name=row["nick_name"],
            card_count=row["card_count"] or 0,
            is_hof=bool(row["is_hof"]),
        )

    @staticmethod
    def _row_to_team(row: aiosqlite.Row) -> TeamRow:
        keys = row.keys()
        return TeamRow(
            team_id=row["team_id"],
            name=row["name"],
            city=row["city"],
            mascot=row["mascot"],
            abbreviation=row["abbreviation"],
            primary_color=row["primary_color"],
            secondary_color=row["secondary_color"],
            player_count=row["player_count"] if "player_count" in keys else None,
            card_count=row["card_count"] if "card_count" in keys else None,
        )

    @staticmethod
    def _row_to_series(row: aiosqlite.Row) -> SeriesRow:
        return SeriesRow(
            series_id=row["series_id"],
            series_name=row["series_name"],
            set_id=row["set_id"],
            set_name=row["set_name"],
            manufacturer_name=row["manufacturer_name"],
            year=row["year"],
            production_code=row["production_code"],
            card_count=row["card_count"] or 0,
            is_base=bool(row["is_base"]),
            parallel_of=row["parallel_of_series"],
            print_run_display=row["print_run_display"],
            color_id=row["color_id"],
            color_name=row["color_name"],
            color_hex=row["color_hex"],
        )

    @staticmethod
    def _row_to_card(row: aiosqlite.Row) -> CardRow:
        return CardRow(
            card_id=row["card_id"],
            card_number=row["card_number"],
            series_id=row["series_id"],
            series_name=row["series_name"],
            set_name=row["set_name"],
            year=row["year"],
            manufacturer_name=row["manufacturer_name"],
            color_name=row["color_name"],
            color_hex=row["color_hex"],
            player_names=row["player_names"],
            team_name=row["team_name"],
            team_abbreviation=row["team_abbreviation"],
            is_rookie=bool(row["is_rookie"]),
            is_autograph=bool(row["is_autograph"]),
            is_short_print=bool(row["is_short_print"]),
            is_relic=bool(row["is_relic"]),
            print_run=row["print_run"],
        )

    # -------------------------------------------------------------------------
    # Name fragment lookups
    # -------------------------------------------------------------------------

    async def search_players(self, fragment: str) -> list[PlayerRow]:
        """Players matching a name fragment, most cards first.

        Multi-word fragments are matched against "first last" and
        "nick last", or split into a first-name and last-name part.
        """
        pattern = contains_pattern(fragment)
        no_apostrophe = contains_pattern(fragment.replace("'", ""))
        parts = fragment.split()

        if len(parts) >= 2:
            first = contains_pattern(parts[0])
            last = contains_pattern(" ".join(parts[1:]))
            where = f"""
                (first_name || ' ' || last_name) LIKE ? {_ESC}
                OR (COALESCE(nick_name, '') || ' ' || last_name) LIKE ? {_ESC}
                OR (first_name LIKE ? {_ESC} AND last_name LIKE ? {_ESC})
                OR REPLACE(first_name || ' ' || last_name, '''', '') LIKE ? {_ESC}
            """
            params: list[object] = [pattern, pattern, first, last, no_apostrophe]
        else:
            where = f"""
                first_name LIKE ? {_ESC}
                OR last_name LIKE ? {_ESC}
                OR nick_name LIKE ? {_ESC}
                OR (first_name || ' ' || last_name) LIKE ? {_ESC}
                OR REPLACE(first_name, '''', '') LIKE ? {_ESC}
                OR REPLACE(last_name, '''', '') LIKE ? {_ESC}
            """
            params = [pattern, pattern, pattern, pattern, no_apostrophe, no_apostrophe]

        rows = await self._fetch_all(
            "player lookup",
            f"""
            SELECT {_PLAYER_COLUMNS}
            FROM player
            WHERE {where}
            ORDER BY card_count DESC, player_id
            LIMIT ?
            """,
            (*params, PLAYER_LOOKUP_LIMIT),
        )
        return [self._row_to_player(row) for row in rows]

    async def search_players_by_soundex(self, code: str) -> list[PlayerRow]:
        """Players whose last name sounds like the given Soundex code."""
        rows = await self._fetch_all(
            "phonetic player lookup",
            f"""
            SELECT {_PLAYER_COLUMNS}
            FROM player
            WHERE soundex(last_name) = ?
            ORDER BY card_count DESC, player_id
            LIMIT ?
            """,
            (code, PLAYER_LOOKUP_LIMIT),
        )
        return [self._row_to_player(row) for row in rows]

    async def search_teams(self, fragment: str) -> list[TeamRow]:
        """Teams whose name, city, mascot or abbreviation contain the fragment."""
        pattern = contains_pattern(fragment)
        rows = await self._fetch_all(
            "team lookup",
            f"""
            SELECT team_id, name, city, mascot, abbreviation, primary_color, secondary_color
            FROM team
            WHERE name LIKE ? {_ESC}
               OR city LIKE ? {_ESC}
               OR mascot LIKE ? {_ESC}
               OR abbreviation LIKE ? {_ESC}
            ORDER BY team_id
            LIMIT ?
            """,
            (pattern, pattern, pattern, pattern, TEAM_LOOKUP_LIMIT),
        )
        return [self._row_to_team(row) for row in rows]

    async def search_series(self, fragment: str) -> list[SeriesRow]:
        """Series whose series, set or manufacturer name contain the fragment."""
        pattern = contains_pattern(fragment)
        rows = await self._fetch_all(
            "set lookup",
            f"""
            {_SERIES_SELECT}
            WHERE s.name LIKE ? {_ESC}
               OR st.name LIKE ? {_ESC}
               OR m.name LIKE ? {_ESC}
            ORDER BY st.year DESC, s.series_id
            LIMIT ?
            """,
            (pattern, pattern, pattern, SERIES_LOOKUP_LIMIT),
        )
        return [self._row_to_series(row) for row in rows]

    async def search_inserts(self, fragment: str) -> list[SeriesRow]:
        """Series whose own name contains the fragment (insert/subset lookup)."""
        rows = await self._fetch_all(
            "insert lookup",
            f"""
            {_SERIES_SELECT}
            WHERE s.name LIKE ? {_ESC}
            ORDER BY st.year DESC, s.series_id
            LIMIT ?
            """,
            (contains_pattern(fragment), INSERT_LOOKUP_LIMIT),
        )
        return [self._row_to_series(row) for row in rows]

    async def search_colors(self, fragment: str) -> list[ColorRow]:
        """Colors whose name contains the fragment."""
        rows = await self._fetch_all(
            "color lookup",
            f"""
            SELECT color_id, name, hex_value
            FROM color
            WHERE name LIKE ? {_ESC}
            ORDER BY color_id
            LIMIT ?
            """,
            (contains_pattern(fragment), COLOR_LOOKUP_LIMIT),
        )
        return [
            ColorRow(color_id=row["color_id"], color_name=row["name"], hex_value=row["hex_value"])
            for row in rows
        ]

    # -------------------------------------------------------------------------
    # Filtered card search and entity listings
    # -------------------------------------------------------------------------

    async def search_cards(self, filters: CardFilters, limit: int) -> list[CardRow]:
        """Cards matching every active filter.

        Ordered by exact card number (when requested), newest year, most
        popular player, then card number.
        """
        qb = QueryBuilder.from_filters(filters)
        order_params: list[object] = []
        exact_first = ""
        if filters.exact_card_number_first and filters.card_number:
            exact_first = "CASE WHEN c.card_number = ? COLLATE NOCASE THEN 0 ELSE 1 END,"
            order_params.append(filters.card_number)

        rows = await self._fetch_all(
            "card search",
            f"""
            {_CARD_SELECT}
            WHERE {qb.build_where()}
            ORDER BY {exact_first} st.year DESC, popularity DESC, c.card_number, c.card_id
            LIMIT ?
            """,
            (*qb.params, *order_params, limit),
        )
        logger.debug("Card search matched %d rows: %s", len(rows), qb.build_where())
        return [self._row_to_card(row) for row in rows]

    async def get_series(self, series_ids: Sequence[int]) -> list[SeriesRow]:
        """Series entities by id."""
        if not series_ids:
            return []
        rows = await self._fetch_all(
            "series listing",
            f"""
            {_SERIES_SELECT}
            WHERE s.series_id IN ({_placeholders(series_ids)})
            """,
            tuple(series_ids),
        )
        return [self._row_to_series(row) for row in rows]

    async def get_series_by_production_code(self, code: str, limit: int) -> list[SeriesRow]:
        """Series carrying an exact production code, newest first."""
        rows = await self._fetch_all(
            "production code lookup",
            f"""
            {_SERIES_SELECT}
            WHERE s.production_code = ? COLLATE NOCASE
            ORDER BY st.year DESC, s.series_id
            LIMIT ?
            """,
            (code, limit),
        )
        return [self._row_to_series(row) for row in rows]

    async def get_teams(self, team_ids: Sequence[int]) -> list[TeamRow]:
        """Teams by id with distinct player and card counts."""
        if not team_ids:
            return []
        rows = await self._fetch_all(
            "team listing",
            f"""
            SELECT
                t.team_id, t.name, t.city, t.mascot, t.abbreviation,
                t.primary_color, t.secondary_color,
                (SELECT COUNT(DISTINCT pt.player_id)
                 FROM player_team pt WHERE pt.team_id = t.team_id) AS player_count,
                (SELECT COUNT(DISTINCT cpt.card_id)
                 {_CARD_PLAYERS}
                 WHERE pt.team_id = t.team_id) AS card_count
            FROM team t
            WHERE t.team_id IN ({_placeholders(team_ids)})
            """,
            tuple(team_ids),
        )
        return [self._row_to_team(row) for row in rows]

    async def get_player_teams(self, player_ids: Sequence[int]) -> dict[int, list[TeamRow]]:
        """Teams each player has appeared for."""
        if not player_ids:
            return {}
        rows = await self._fetch_all(
            "player teams",
            f"""
            SELECT DISTINCT
                pt.player_id, t.team_id, t.name, t.city, t.mascot, t.abbreviation,
                t.primary_color, t.secondary_color
            FROM player_team pt
            JOIN team t ON pt.team_id = t.team_id
            WHERE pt.player_id IN ({_placeholders(player_ids)})
            ORDER BY pt.player_id, t.team_id
            """,
            tuple(player_ids),
        )
        teams: dict[int, list[TeamRow]] = {}
        for row in rows:
            teams.setdefault(row["player_id"], []).append(self._row_to_team(row))
        return teams
