"""SQL used by the PostgreSQL/PostGIS store."""

from __future__ import annotations

from psycopg import sql

LOCATION_COLUMNS = ("prefecture", "municipality", "address_1", "address_2", "block_lot", "geom")


def schema_statements(text_search_config: str) -> list[sql.Composed | sql.SQL]:
    return [
        sql.SQL("CREATE EXTENSION IF NOT EXISTS postgis"),
        sql.SQL(
            """
            CREATE TABLE IF NOT EXISTS locations (
                id BIGSERIAL PRIMARY KEY,
                prefecture VARCHAR(255),
                municipality VARCHAR(255),
                address_1 VARCHAR(255),
                address_2 VARCHAR(255),
                block_lot VARCHAR(255),
                full_address_tsvector TSVECTOR GENERATED ALWAYS AS (
                    to_tsvector({config}::regconfig,
                        coalesce(prefecture, '') || ' ' || coalesce(municipality, '') || ' ' ||
                        coalesce(address_1, '') || ' ' || coalesce(address_2, ''))
                ) STORED,
                geom GEOGRAPHY(POINT, 4326)
            )
            """
        ).format(config=sql.Literal(text_search_config)),
        sql.SQL("CREATE INDEX IF NOT EXISTS locations_geom_idx ON locations USING GIST (geom)"),
        sql.SQL(
            "CREATE INDEX IF NOT EXISTS locations_full_address_tsvector_idx "
            "ON locations USING GIN (full_address_tsvector)"
        ),
        sql.SQL(
            """
            CREATE TABLE IF NOT EXISTS processed_files (
                id BIGSERIAL PRIMARY KEY,
                file_path TEXT UNIQUE NOT NULL,
                processed_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
                record_count INTEGER NOT NULL
            )
            """
        ),
    ]


COPY_LOCATIONS = sql.SQL("COPY locations ({columns}) FROM STDIN").format(
    columns=sql.SQL(", ").join(sql.Identifier(column) for column in LOCATION_COLUMNS)
)

IS_FILE_PROCESSED = "SELECT EXISTS(SELECT 1 FROM processed_files WHERE file_path = %s)"

MARK_FILE_PROCESSED = """
    INSERT INTO processed_files (file_path, record_count)
    VALUES (%s, %s)
    ON CONFLICT (file_path) DO NOTHING
"""

COUNT_LOCATIONS = "SELECT COUNT(*) FROM locations"

SAMPLE_GEOMETRY = "SELECT ST_AsText(geom) FROM locations LIMIT 1"

_SELECT_LOCATION = """
    SELECT
        id,
        prefecture,
        municipality,
        address_1,
        address_2,
        block_lot,
        ST_Y(geom::geometry) AS latitude,
        ST_X(geom::geometry) AS longitude
    FROM locations
"""

SEARCH_BY_TEXT = (
    _SELECT_LOCATION
    + """
    WHERE full_address_tsvector @@ plainto_tsquery(%(config)s::regconfig, %(query)s)
    ORDER BY ts_rank(full_address_tsvector, plainto_tsquery(%(config)s::regconfig, %(query)s)) DESC, id
    LIMIT %(limit)s
"""
)

FIND_NEAREST = (
    _SELECT_LOCATION
    + """
    WHERE ST_DWithin(geom, ST_SetSRID(ST_MakePoint(%(lon)s, %(lat)s), 4326)::geography, %(radius)s)
    ORDER BY geom <-> ST_SetSRID(ST_MakePoint(%(lon)s, %(lat)s), 4326)::geography
    LIMIT 1
"""
)


def point_ewkt(latitude: float, longitude: float) -> str:
    # PostGIS axis order is lon, lat.
    return f"SRID=4326;POINT({longitude!r} {latitude!r})"
