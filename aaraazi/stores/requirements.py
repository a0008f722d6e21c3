from aaraazi.cache import ResourceCache
from aaraazi.resources.requirements import Requirement, RequirementsResource


class RequirementsStore(ResourceCache[Requirement, list[Requirement]]):
    def __init__(
        self, service: RequirementsResource, coalesce: bool = False, debug: bool = False
    ):
        super().__init__(
            service,
            name="requirements",
            list_error="Failed to load requirements",
            detail_error="Failed to load requirement",
            coalesce=coalesce,
            debug=debug,
        )
