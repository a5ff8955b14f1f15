"""
Short code generation and collision resolution.

Custom codes are validated and checked once; a clash is the caller's
problem. Random codes are drawn with the secrets module (so codes can't
be predicted from earlier ones) and redrawn on collision, up to a cap.
"""

import logging
import secrets
import string

from tinylink.exceptions import CodeConflict, CodeSpaceExhausted, InvalidCode
from tinylink.schemas.link import LinkRecord
from tinylink.services.link_registry import LinkRegistry
from tinylink.validators import CODE_MAX_LENGTH, CODE_MIN_LENGTH, is_valid_code


logger = logging.getLogger(__name__)


class CodeGenerator:
    """Produces valid, unused codes for new links"""

    CODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

    def __init__(self, length: int = 6, max_attempts: int = 20):
        if not CODE_MIN_LENGTH <= length <= CODE_MAX_LENGTH:
            raise ValueError(f"Generated code length must be 6-8, got {length}")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.length = length
        self.max_attempts = max_attempts

    @staticmethod
    def validate_format(candidate: str) -> bool:
        return is_valid_code(candidate)

    def generate_random(self) -> str:
        """Draw each character uniformly and independently from the 62-letter alphabet"""
        return "".join(secrets.choice(self.CODE_ALPHABET) for _ in range(self.length))

    async def create_with_custom_code(
        self,
        registry: LinkRegistry,
        code: str,
        url: str
    ) -> LinkRecord:
        """
        Create a link under a user-chosen code.

        Format is checked before any storage access, then existence. The
        existence check can race with another writer; registry.create()
        still raises CodeConflict in that case. Never retried.
        """
        if not self.validate_format(code):
            raise InvalidCode(code)
        if await registry.exists(code):
            raise CodeConflict(code)
        return await registry.create(code, url)

    async def create_with_random_code(self, registry: LinkRegistry, url: str) -> LinkRecord:
        """
        Create a link under a freshly generated code.

        A code that exists already, or that a concurrent writer takes
        between the check and the insert, costs one attempt.

        Raises:
            CodeSpaceExhausted: after max_attempts draws without success
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.generate_random()

            if await registry.exists(code):
                continue

            try:
                return await registry.create(code, url)
            except CodeConflict:
                logger.warning("Generated code %s was taken concurrently (attempt %d)", code, attempt)

        logger.error("No unused code found after %d attempts", self.max_attempts)
        raise CodeSpaceExhausted(self.max_attempts)
