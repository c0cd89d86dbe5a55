"""
Services for querying a tracking database.
"""

import logging
from typing import List

from sqlalchemy import or_
from sqlmodel import Session, select, col

from pathfind.lanes.models import IDType
from pathfind.tracking.models import Lane, Library, Sample, Study

logger = logging.getLogger(__name__)


def get_lanes_by_id(session: Session, id: str, id_type: IDType) -> List[Lane]:
    """
    Returns the lanes matching an ID of the given type, ordered by their
    database ID. An empty list means nothing matched.

    Args:
        session: Session for the tracking database to search
        id: The ID to look for
        id_type: What kind of thing the ID identifies

    Raises:
        ValueError: for IDType.FILE, which has to be expanded by the
            caller before searching
    """
    statement = select(Lane)

    if id_type == IDType.LANE:
        # an untagged lane name also finds all of the tagged (multiplexed)
        # lanes that were split out of it
        if "#" in id:
            statement = statement.where(Lane.name == id)
        else:
            statement = statement.where(
                or_(Lane.name == id, col(Lane.name).startswith(f"{id}#", autoescape=True))
            )

    elif id_type == IDType.LIBRARY:
        statement = statement.join(Library).where(Library.name == id)

    elif id_type == IDType.SAMPLE:
        statement = statement.join(Library).join(Sample).where(Sample.name == id)

    elif id_type == IDType.STUDY:
        statement = statement.join(Library).join(Sample).join(Study)
        if id.isdecimal():
            statement = statement.where(Study.ssid == int(id))
        else:
            statement = statement.where(Study.name == id)

    elif id_type == IDType.SPECIES:
        statement = statement.join(Library).join(Sample).where(
            col(Sample.species).icontains(id, autoescape=True)
        )

    else:
        raise ValueError(f"can't search for IDs of type '{id_type.value}'")

    statement = statement.order_by(Lane.id)
    lanes = session.exec(statement).all()
    logger.debug("found %d lanes for %s '%s'", len(lanes), id_type.value, id)
    return list(lanes)
