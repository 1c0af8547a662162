"""Pytest fixtures for card search tests."""

from __future__ import annotations

import sqlite3
from collections.abc import AsyncGenerator, Generator
from contextlib import closing
from pathlib import Path
from typing import Any

import aiosqlite
import pytest

from card_search import config as config_module
from card_search.config import Settings
from card_search.data.database import CatalogDatabase, LookupCaches, configure_connection
from card_search.data.database.catalog import SCHEMA_SQL
from card_search.exceptions import RepositoryError
from card_search.search import SearchService

# A small catalog: four players, four teams, five series across three sets
SEED_SQL = """
INSERT INTO manufacturer (manufacturer_id, name) VALUES
    (1, 'Bowman'),
    (2, 'Topps');

INSERT INTO card_set (set_id, name, year, manufacturer_id) VALUES
    (1, 'Bowman Chrome', 2020, 1),
    (2, 'Topps Update', 2011, 2),
    (3, 'Topps', 2022, 2);

INSERT INTO color (color_id, name, hex_value) VALUES
    (1, 'Pink', '#FFC0CB'),
    (2, 'White', '#FFFFFF'),
    (3, 'Gold', '#FFD700');

INSERT INTO series (
    series_id, name, set_id, color_id, production_code, card_count, is_base,
    parallel_of_series, print_run_display
) VALUES
    (1, 'Bowman Chrome', 1, NULL, 'CMP123456', 1, 1, NULL, NULL),
    (2, 'Bowman Chrome Pink Refractor', 1, 1, NULL, 1, 0, 1, '/25'),
    (3, 'Topps Update', 2, NULL, 'CMP654321', 1, 1, NULL, NULL),
    (4, 'Topps', 3, NULL, NULL, 2, 1, NULL, NULL),
    (5, 'Future Stars', 3, NULL, NULL, 1, 0, NULL, NULL);

INSERT INTO team (
    team_id, name, city, mascot, abbreviation, primary_color, secondary_color
) VALUES
    (1, 'Los Angeles Angels', 'Los Angeles', 'Angels', 'LAA', '#BA0021', '#003263'),
    (2, 'Chicago White Sox', 'Chicago', 'White Sox', 'CWS', '#27251F', '#C4CED4'),
    (3, 'Seattle Mariners', 'Seattle', 'Mariners', 'SEA', '#0C2C56', '#005C5C'),
    (4, 'Cleveland Guardians', 'Cleveland', 'Guardians', 'CLE', '#00385D', '#E50022');

INSERT INTO player (player_id, first_name, last_name, nick_name, card_count, is_hof) VALUES
    (1, 'Mike', 'Trout', NULL, 2500, 0),
    (2, 'Steven', 'Kwan', NULL, 300, 0),
    (3, 'Evan', 'White', NULL, 150, 0),
    (4, 'Evan', 'Longoria', NULL, 1200, 0);

INSERT INTO player_team (player_team_id, player_id, team_id) VALUES
    (1, 1, 1),
    (2, 2, 4),
    (3, 3, 3),
    (4, 4, 3);

INSERT INTO card (
    card_id, card_number, series_id, is_rookie, is_autograph, is_short_print, is_relic,
    print_run
) VALUES
    (1, 'US175', 3, 1, 0, 0, 0, NULL),
    (2, '108', 4, 0, 0, 0, 0, NULL),
    (3, 'BCP-25', 2, 1, 1, 0, 0, 25),
    (4, 'BCP-25', 1, 1, 0, 0, 0, NULL),
    (5, '27', 4, 0, 0, 0, 0, NULL),
    (6, 'FS-1', 5, 0, 0, 0, 0, NULL),
    (7, '17', 3, 0, 0, 0, 0, NULL);

INSERT INTO card_player_team (card_id, player_team_id) VALUES
    (1, 1),
    (2, 1),
    (3, 2),
    (4, 2),
    (5, 3),
    (6, 1),
    (7, 2);
"""


class FailingRepository:
    """Delegates to a real catalog but fails the named lookups."""

    def __init__(self, inner: CatalogDatabase, *failing: str):
        self._inner = inner
        self._failing = set(failing)

    def __getattr__(self, name: str) -> Any:
        if name in self._failing:

            async def fail(*args: Any, **kwargs: Any) -> Any:
                raise RepositoryError(name)

            return fail
        return getattr(self._inner, name)


@pytest.fixture(autouse=True)
def settings(tmp_path: Path) -> Generator[Settings, None, None]:
    """Point the settings singleton at a per-test catalog path."""
    test_settings = Settings(
        catalog_db_path=tmp_path / "catalog.sqlite",
        log_level="WARNING",
    )
    config_module._settings = test_settings
    yield test_settings
    config_module._settings = None


@pytest.fixture
def catalog_path(settings: Settings) -> Path:
    """Write the seeded catalog to the configured path."""
    path = settings.catalog_db_path
    with closing(sqlite3.connect(path)) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.executescript(SEED_SQL)
        conn.commit()
    return path


@pytest.fixture
async def catalog_connection(catalog_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """Open connection to the seeded catalog."""
    conn = await aiosqlite.connect(catalog_path)
    await configure_connection(conn)
    yield conn
    await conn.close()


@pytest.fixture
def catalog(catalog_connection: aiosqlite.Connection) -> CatalogDatabase:
    """Repository over the seeded catalog."""
    return CatalogDatabase(catalog_connection)


@pytest.fixture
def caches(settings: Settings) -> LookupCaches:
    return LookupCaches.from_settings(settings)


@pytest.fixture
def service(catalog: CatalogDatabase, caches: LookupCaches, settings: Settings) -> SearchService:
    """Search service over the seeded catalog."""
    return SearchService(catalog, caches, settings)


@pytest.fixture
def failing_repository(catalog: CatalogDatabase):
    """Factory for a catalog whose named lookups raise RepositoryError."""

    def _make(*failing: str) -> FailingRepository:
        return FailingRepository(catalog, *failing)

    return _make
