"""Assignment of sensor model parameters to correlation parameter groups."""

from __future__ import annotations

import logging

import numpy as np

from decay_correlation.errors import check_index, origin_for

__all__ = ["GroupMapping", "UNASSIGNED"]

UNASSIGNED = -1
"""Group value reported for parameters not assigned to any group."""

logger = logging.getLogger(__name__)


class GroupMapping:
    """Fixed-length table mapping parameter indices to group indices."""

    def __init__(self, num_parameters: int, num_groups: int) -> None:
        self._num_groups = int(num_groups)
        self._groups = np.full(int(num_parameters), UNASSIGNED, dtype=np.intp)

    def __len__(self) -> int:
        return int(self._groups.size)

    def get_group_count(self) -> int:
        """Return the number of sensor model parameters held by the table."""

        return int(self._groups.size)

    def get_group(self, sm_index: int) -> int:
        index = self._check_parameter(sm_index, "get_group")
        return int(self._groups[index])

    def set_group(self, sm_index: int, group_index: int) -> None:
        """Assign ``sm_index`` to ``group_index`` replacing any prior group."""

        origin = origin_for("set_group")
        index = self._check_parameter(sm_index, "set_group")
        group = check_index(
            group_index,
            self._num_groups,
            label="Correlation parameter group",
            origin=origin,
        )
        self._groups[index] = group
        logger.debug(
            "Sensor model parameter assigned to correlation group.",
            extra={
                "event": "mapping.set_group",
                "sm_index": index,
                "group_index": group,
            },
        )

    def clear_group(self, sm_index: int) -> None:
        index = self._check_parameter(sm_index, "clear_group")
        self._groups[index] = UNASSIGNED
        logger.debug(
            "Sensor model parameter removed from its correlation group.",
            extra={"event": "mapping.clear_group", "sm_index": index},
        )

    def assignments(self) -> np.ndarray:
        """Return a read-only snapshot of the whole assignment table."""

        snapshot = self._groups.copy()
        snapshot.setflags(write=False)
        return snapshot

    def members(self, group_index: int) -> tuple[int, ...]:
        """Return the parameter indices currently assigned to ``group_index``."""

        group = check_index(
            group_index,
            self._num_groups,
            label="Correlation parameter group",
            origin=origin_for("members"),
        )
        return tuple(int(index) for index in np.flatnonzero(self._groups == group))

    def _check_parameter(self, sm_index: int, operation: str) -> int:
        return check_index(
            sm_index,
            int(self._groups.size),
            label="Sensor model parameter",
            origin=origin_for(operation),
        )
