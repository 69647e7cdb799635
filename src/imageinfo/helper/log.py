import logging

logger = logging.getLogger("imageinfo")


def write_heading(heading: str):
    logger.info("")
    logger.info("-" * len(heading))
    logger.info(heading)
    logger.info("-" * len(heading))


def write_subheading(subheading: str):
    logger.info("")
    logger.info(f"-- {subheading}")


def write_message(message: str = ""):
    logger.info(message)
