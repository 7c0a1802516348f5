"""
Composition — resolve a wizard selection into a generation plan.

    from templatestudio.core.services.composition import CompositionResolver

    plan = CompositionResolver(context).compose(selection)
"""

from templatestudio.core.services.composition.builder import (  # noqa: F401
    GenerationItemBuilder,
)
from templatestudio.core.services.composition.catalog import (  # noqa: F401
    CompositionCatalogEntry,
    build_composition_catalog,
)
from templatestudio.core.services.composition.query import (  # noqa: F401
    KNOWN_PROPERTIES,
    AllOf,
    CompositionQuery,
    Equals,
    MemberOf,
    QueryableContext,
)
from templatestudio.core.services.composition.resolver import (  # noqa: F401
    CompositionResolver,
)
