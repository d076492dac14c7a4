"""Service for handling feedback form submissions (simulated delivery)."""

import logging
import re
from typing import Mapping, Optional

from cv_site.models.request_models import FeedbackRequest

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_TEXT_LENGTH = 2


class FeedbackService:
    """Validate feedback submissions and acknowledge them without sending anything."""

    def validate(self, request: FeedbackRequest) -> None:
        """
        Validate a feedback submission.

        Raises:
            ValueError: If a field is too short or the email is malformed
        """
        if len(request.name.strip()) < MIN_TEXT_LENGTH:
            raise ValueError(f"name must be at least {MIN_TEXT_LENGTH} characters")
        if len(request.message.strip()) < MIN_TEXT_LENGTH:
            raise ValueError(f"message must be at least {MIN_TEXT_LENGTH} characters")
        if not EMAIL_PATTERN.match(request.email.strip()):
            raise ValueError("email is not a valid address")

    def submit(
        self,
        request: FeedbackRequest,
        ui: Mapping[str, str],
        recipient: Optional[str] = None
    ) -> str:
        """
        Accept a feedback submission.

        Delivery is simulated: the submission is only logged.

        Returns:
            str: Localized acknowledgement message

        Raises:
            ValueError: If the submission is invalid
        """
        self.validate(request)
        logger.info(
            "Feedback from %s <%s> accepted (simulation, recipient: %s)",
            request.name.strip(),
            request.email.strip(),
            recipient or "unset"
        )
        return ui["feedback_success_message"]
