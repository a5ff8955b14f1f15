from typing import List, Optional

from tinylink.exceptions import NotFound
from tinylink.schemas.link import LinkRecord
from tinylink.services.code_generator import CodeGenerator
from tinylink.services.link_registry import LinkRegistry
from tinylink.validators import validate_web_url


class LinkService:
    """
    Link service with dependency injection for the registry and generator.

    This is the one object the routes talk to:
    - creation: validate url -> validate-or-generate code -> registry create
    - redirect: registry increment -> registry get

    Errors are the ones from tinylink.exceptions; routes translate them.
    """

    def __init__(self, registry: LinkRegistry, code_generator: CodeGenerator):
        """
        Args:
            registry: Link registry over the configured storage
            code_generator: Code generation / collision policy
        """
        self.registry = registry
        self.code_generator = code_generator

    async def create_link(self, url: str, code: Optional[str] = None) -> LinkRecord:
        """Create a link, generating a code when none is given.

        The URL is checked first so a bad request never reaches storage,
        not even for the existence probe.
        """
        url = validate_web_url(url)

        if code is None:
            return await self.code_generator.create_with_random_code(self.registry, url)
        return await self.code_generator.create_with_custom_code(self.registry, code, url)

    async def list_links(self) -> List[LinkRecord]:
        return await self.registry.list()

    async def get_link(self, code: str) -> LinkRecord:
        return await self.registry.get(code)

    async def resolve_redirect(self, code: str) -> LinkRecord:
        """
        Record a click and return the link to redirect to.

        A missing code records nothing and raises NotFound. If the link is
        deleted between the increment and the read, NotFound too.
        """
        if not await self.registry.increment_click(code):
            raise NotFound(code)
        return await self.registry.get(code)

    async def delete_link(self, code: str) -> None:
        await self.registry.delete(code)
