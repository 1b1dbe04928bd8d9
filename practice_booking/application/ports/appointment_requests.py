from __future__ import annotations

from abc import ABC, abstractmethod

from practice_booking.application.dto.appointment_request import AppointmentRequestPayload
from practice_booking.domain.entities.scheduling import SubmissionReceipt


class AppointmentRequestPort(ABC):
    @abstractmethod
    async def submit_appointment_request(self, payload: AppointmentRequestPayload) -> SubmissionReceipt:
        """
        Submit an appointment request.
        Raises SubmissionRejectedError or PracticeApiUpstreamError on failure.
        """
        raise NotImplementedError
