"""
The Finder - searches every tracking database for lanes matching a set of
IDs and filters them by QC status and file type.
"""

import logging
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError

from core.config import Settings
from core.db import DatabaseManager
from core.exceptions import AdaptationError, PartitionConnectionError
from core.progress import NO_PROGRESS, ProgressReporter
from pathfind.finder.sorter import Sorter
from pathfind.lanes.lane import Lane
from pathfind.lanes.models import Identifier, IDType, QueryFilter
from pathfind.lanes.roles import LaneRole, role_for_context
from pathfind.tracking.services import get_lanes_by_id

logger = logging.getLogger(__name__)


class Finder:
    """
    Finds lanes across all of the configured tracking databases.

    The lane role is looked up once, from the calling context (e.g.
    "pathfind"), using the LANE_ROLES mapping in the settings. A Finder
    built for a context that has no role fails straight away with a
    ConfigurationError.
    """

    def __init__(
        self,
        settings: Settings,
        context: str,
        db_manager: DatabaseManager | None = None,
        sorter: Sorter | None = None,
        progress: ProgressReporter = NO_PROGRESS,
    ):
        self.settings = settings
        self.context = context
        self.role: LaneRole = role_for_context(settings.LANE_ROLES, context)
        self.db_manager = db_manager or DatabaseManager(settings)
        self.sorter = sorter or Sorter()
        self.progress = progress

    def find_lanes(
        self,
        ids: Iterable[Identifier | str],
        id_type: IDType,
        filters: QueryFilter | None = None,
    ) -> List[Lane]:
        """
        Find lanes for the IDs, filter them and sort them.

        Args:
            ids: Identifiers to search for. Plain strings are taken to be
                IDs of id_type. Duplicates are searched for once
            id_type: Type of all of the IDs. Must not be IDType.FILE
            filters: Optional QC status and file category filters

        Returns:
            Sorted list of lanes. Empty if nothing matched

        Raises:
            AdaptationError: if the role can't be applied to a lane
            PartitionConnectionError: if a database can't be reached or
                can't be searched
        """
        filters = filters or QueryFilter()

        if id_type == IDType.FILE:
            raise ValueError("IDs from a file must be read before searching")
        if filters.file_category is not None and filters.file_category not in self.role.categories:
            raise ValueError(
                f"{self.role.name} lanes don't have '{filters.file_category.value}' files"
            )

        identifiers = [
            id if isinstance(id, Identifier) else Identifier(type=id_type, value=id)
            for id in ids
        ]
        for identifier in identifiers:
            if identifier.type != id_type:
                raise ValueError(
                    f'ID "{identifier.value}" is a {identifier.type.value} ID, '
                    f"not a {id_type.value} ID"
                )
        values = list(dict.fromkeys(identifier.value for identifier in identifiers))

        logger.debug('searching with %d IDs of type "%s"', len(values), id_type.value)

        lanes = self._find_lanes(values, id_type)

        logger.debug("found %d lanes", len(lanes))

        filtered_lanes = []
        for lane in lanes:

            # drop the lane only if we're filtering on QC status, the lane has
            # a QC status, and the two differ. Lanes with no status are kept
            if (
                filters.qc_status is not None
                and lane.qc_status is not None
                and lane.qc_status != filters.qc_status
            ):
                logger.debug(
                    'lane "%s" filtered by QC status (actual status is "%s"; '
                    'requiring status "%s")',
                    lane.name,
                    lane.qc_status.value,
                    filters.qc_status.value,
                )
                continue

            # only look for files if we've been asked for a file type
            if filters.file_category is not None:
                lane.find_files(filters.file_category)
                if not lane.has_files():
                    logger.debug(
                        'lane "%s" has no files of type "%s"; filtered out',
                        lane.name,
                        filters.file_category.value,
                    )
                    continue

            filtered_lanes.append(lane)

        return self.sorter.sort_lanes(filtered_lanes)

    def _find_lanes(self, ids: List[str], id_type: IDType) -> List[Lane]:
        """Search every database for every ID and wrap each row as a Lane"""
        db_names = self.db_manager.database_names

        lanes = []
        with self.progress.track("finding lanes", len(db_names) * len(ids)) as tick:
            for db_name in db_names:
                logger.debug('searching "%s"', db_name)
                database = self.db_manager.get_database(db_name)

                for id in ids:
                    logger.debug('looking for ID "%s"', id)
                    try:
                        rows = get_lanes_by_id(database.session, id, id_type)
                    except SQLAlchemyError as e:
                        raise PartitionConnectionError(db_name, e) from e

                    for row in rows:
                        try:
                            lane = Lane(row=row, database=database, role=self.role)
                        except Exception as e:  # pylint: disable=broad-exception-caught
                            raise AdaptationError(
                                f'ERROR: couldn\'t apply role "{self.role.name}" '
                                f"to lanes: {e}"
                            ) from e
                        lanes.append(lane)
                    tick(1)

        return lanes
