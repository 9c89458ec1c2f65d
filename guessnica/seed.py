import logging
import yaml
from sqlmodel import Session, select
from guessnica.models import Location, Riddle, RiddleDifficulty

logger = logging.getLogger(__name__)


def load_seed_file(path: str) -> list[dict]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data.get("locations", [])


def seed_database(session: Session, path: str) -> tuple[int, int]:
    """
    Insert the locations and riddles listed in a YAML seed file.
    Entries that already exist are skipped, so seeding twice is harmless.
    Returns (locations_added, riddles_added).
    """
    locations_added = riddles_added = 0

    for entry in load_seed_file(path):
        location = session.exec(
            select(Location)
            .where(Location.latitude == entry["latitude"])
            .where(Location.longitude == entry["longitude"])
            .where(Location.short_description == entry.get("short_description"))
        ).first()
        if location is None:
            location = Location(
                latitude=entry["latitude"],
                longitude=entry["longitude"],
                image_url=entry["image_url"],
                short_description=entry.get("short_description"),
            )
            session.add(location)
            session.flush()
            locations_added += 1

        for r in entry.get("riddles", []):
            exists = session.exec(
                select(Riddle)
                .where(Riddle.description == r["description"])
                .where(Riddle.location_id == location.id)
            ).first()
            if exists is not None:
                continue
            session.add(Riddle(
                description=r["description"],
                difficulty=RiddleDifficulty(r.get("difficulty", 1)),
                time_limit_seconds=r["time_limit_seconds"],
                max_distance_meters=r["max_distance_meters"],
                location_id=location.id,
            ))
            riddles_added += 1

    session.commit()
    logger.info("Seeded %d locations and %d riddles from %s", locations_added, riddles_added, path)
    return locations_added, riddles_added
