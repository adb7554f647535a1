"""Board geometry: path lengths, start tiles, special tiles and tile ids."""

from app.schemas.ludo import LudoColor, SpecialTileType

MAIN_PATH_LENGTH = 52
SAFE_PATH_LENGTH = 5
MAX_PROGRESS = MAIN_PATH_LENGTH + SAFE_PATH_LENGTH
TOKENS_PER_PLAYER = 4

HOME = "home"
FINISHED = "finished"

# Assigned in join order
PLAYER_COLORS: list[LudoColor] = [
    LudoColor.RED,
    LudoColor.BLUE,
    LudoColor.GREEN,
    LudoColor.YELLOW,
]

START_INDICES: dict[LudoColor, int] = {
    LudoColor.RED: 0,
    LudoColor.BLUE: 13,
    LudoColor.GREEN: 26,
    LudoColor.YELLOW: 39,
}

SPECIAL_TILES: dict[int, SpecialTileType] = {
    5: SpecialTileType.HEAT,
    12: SpecialTileType.BOND,
    18: SpecialTileType.FREEZE,
    25: SpecialTileType.HEAT,
    31: SpecialTileType.BOND,
    38: SpecialTileType.FREEZE,
    44: SpecialTileType.HEAT,
    51: SpecialTileType.BOND,
}


def main_tile_id(index: int) -> str:
    return f"main_{index}"


def safe_tile_id(color: LudoColor, index: int) -> str:
    return f"safe_{color.value}_{index}"


def start_tile_id(color: LudoColor) -> str:
    return main_tile_id(START_INDICES[color])


def tile_for_progress(color: LudoColor, progress: int) -> str:
    """Map a token's path progress to the tile it occupies.

    The main loop is shared and offset by the color's start index; past it the
    token enters its color's private safe lane, and at MAX_PROGRESS it is done.
    """
    if progress < 0:
        return HOME
    if progress < MAIN_PATH_LENGTH:
        return main_tile_id((START_INDICES[color] + progress) % MAIN_PATH_LENGTH)
    if progress < MAX_PROGRESS:
        return safe_tile_id(color, progress - MAIN_PATH_LENGTH)
    return FINISHED


def main_index(tile_id: str) -> int | None:
    """Return the main-path index of a tile, or None for any other tile."""
    if not tile_id.startswith("main_"):
        return None
    return int(tile_id.split("_", 1)[1])


def is_start_tile(tile_id: str) -> bool:
    return main_index(tile_id) in START_INDICES.values()


def special_tile_at(tile_id: str) -> SpecialTileType | None:
    index = main_index(tile_id)
    if index is None:
        return None
    return SPECIAL_TILES.get(index)
