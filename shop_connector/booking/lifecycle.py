"""
Appointment lifecycle as seen by the connector.

    Scheduled --confirm--> Confirmed
    Scheduled | Confirmed --reschedule--> (same status, new start/end)
    Scheduled | Confirmed --cancel--> Canceled   (terminal)

Confirmation happens outside the connector; it is listed so the graph is
complete. Nothing ever leaves Canceled. Statuses the backend reports that
the connector does not know are treated as Scheduled.

Usage:
    lifecycle = AppointmentLifecycle(record.status)
    lifecycle.transition(AppointmentTrigger.CANCEL)  # raises if not allowed
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shop_connector.errors import InvalidTransitionError
from shop_connector.schemas.appointment_schema import AppointmentStatus

logger = logging.getLogger(__name__)


class AppointmentTrigger(str, Enum):
    """Events that change an appointment."""
    CONFIRM = "confirm"
    RESCHEDULE = "reschedule"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_state: AppointmentStatus
    to_state: AppointmentStatus
    trigger: AppointmentTrigger


def coerce_status(raw: Optional[str]) -> AppointmentStatus:
    """Map a backend status string onto the statuses the connector knows."""
    try:
        return AppointmentStatus(raw)
    except ValueError:
        return AppointmentStatus.SCHEDULED


class AppointmentLifecycle:
    """Validates status changes for one appointment."""

    TRANSITIONS: list[Transition] = [
        Transition(AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED,
                   AppointmentTrigger.CONFIRM),

        # --- Reschedule keeps the status ---
        Transition(AppointmentStatus.SCHEDULED, AppointmentStatus.SCHEDULED,
                   AppointmentTrigger.RESCHEDULE),
        Transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CONFIRMED,
                   AppointmentTrigger.RESCHEDULE),

        # --- Cancel is terminal ---
        Transition(AppointmentStatus.SCHEDULED, AppointmentStatus.CANCELED,
                   AppointmentTrigger.CANCEL),
        Transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELED,
                   AppointmentTrigger.CANCEL),
    ]

    def __init__(self, status: Optional[str] = None) -> None:
        self._current_state = coerce_status(status)

    @property
    def current_state(self) -> AppointmentStatus:
        return self._current_state

    def transition(self, trigger: AppointmentTrigger) -> AppointmentStatus:
        """
        Apply a trigger to the current status.

        Returns:
            The resulting status.

        Raises:
            InvalidTransitionError: If the trigger is not allowed from the current status.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state
                logger.debug(
                    "Appointment transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        raise InvalidTransitionError(
            f"Cannot {trigger.value} an appointment that is {self._current_state.value}."
        )

    def get_valid_triggers(self) -> list[AppointmentTrigger]:
        """Return all triggers valid from the current status."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def is_terminal(self) -> bool:
        return self._current_state == AppointmentStatus.CANCELED
