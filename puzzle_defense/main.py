import logging


class Session:
    """Headless session: overworld first, then maps generated from its nodes."""

    def __init__(self):
        # ---------------------------
        # LAZY IMPORTS
        # ---------------------------
        from puzzle_defense.config import get_logger
        from puzzle_defense.game.data.maps.overworld import initialize_overworld_map

        self.logger = get_logger(__name__)
        self.logger.info("=" * 60)
        self.logger.info("Session initialization started")

        self.overworld = initialize_overworld_map()
        self.logger.info(
            f"Overworld ready: {self.overworld.overworld_map.width}x{self.overworld.overworld_map.height}, "
            f"{len(self.overworld.nodes)} nodes"
        )

    def play_node(self, tile_x, tile_y, seed=None):
        generated = self.overworld.select_node(tile_x, tile_y, seed=seed)
        if generated is None:
            self.logger.warning(f"Nothing to play at ({tile_x}, {tile_y})")
            return None

        for row in generated.format_rows():
            self.logger.debug(row)
        return generated.to_tile_map()


# ------------------------ # ENTRY POINT # ------------------------

def main(seed=None):
    from puzzle_defense.config import get_project_root, setup_logging

    # Initialize logging first
    project_root = get_project_root()
    logger = setup_logging(project_root)

    logger.info("=" * 60)
    logger.info("Application started")
    logger.info(f"Project root: {project_root}")

    try:
        session = Session()
        first = session.overworld.nodes[0]
        logger.info(f"Playing first node '{first.description}'...")
        tile_map = session.play_node(first.x, first.y, seed=seed)
        logger.info(f"Gameplay map ready: {tile_map.width}x{tile_map.height} tiles")

    except Exception as e:
        logger.critical(f"Critical error in main: {e}", exc_info=True)
        raise
    finally:
        logger.info("Application terminated")
        logger.info("=" * 60)
        logging.shutdown()


if __name__ == "__main__":
    main()
