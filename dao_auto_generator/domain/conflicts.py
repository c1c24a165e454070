"""
Name conflict resolution for properties and relationship methods.
"""

import logging
from collections import OrderedDict
from typing import List

from dao_auto_generator.domain.methods import MethodDescriptor
from dao_auto_generator.domain.properties import AbstractBeanPropertyDescriptor
from dao_auto_generator.exceptions import NamingConflictError

logger = logging.getLogger(__name__)


class NameConflictResolver:
    """
    Assigns alternative names to colliding descriptors.

    Properties use two passes: the first one flips both parties of every
    collision, the second one checks that the alternative names are unique.
    Relationship methods are grouped by name and every member of a group
    larger than one is flipped, without a verification pass.
    """

    def resolve_properties(self, table_name: str, descriptors: List[AbstractBeanPropertyDescriptor]) -> None:
        """
        Resolve getter name collisions between the properties of one table.

        Raises:
            NamingConflictError: If two properties still share a getter name
                after alternative names were applied
        """
        seen = {}
        for descriptor in descriptors:
            name = descriptor.getter_name
            if name in seen:
                logger.debug(f"Property name conflict on '{table_name}.{name}', using alternative names")
                seen[name].use_alternative_name()
                descriptor.use_alternative_name()
            else:
                seen[name] = descriptor

        final_names = {}
        for descriptor in descriptors:
            name = descriptor.getter_name
            if name in final_names:
                raise NamingConflictError(
                    f"Unsolvable name conflict in table '{table_name}': "
                    f"{final_names[name]!r} and {descriptor!r} both generate '{name}'",
                    table=table_name,
                    name=name,
                )
            final_names[name] = descriptor

    def resolve_methods(self, table_name: str, descriptors: List[MethodDescriptor]) -> None:
        """Flip every relationship method descriptor whose name is shared."""
        by_name = OrderedDict()
        for descriptor in descriptors:
            by_name.setdefault(descriptor.name, []).append(descriptor)

        for name, group in by_name.items():
            if len(group) > 1:
                logger.debug(
                    f"{len(group)} relationship methods named '{name}' on '{table_name}', "
                    f"using alternative names"
                )
                for descriptor in group:
                    descriptor.use_alternative_name()
