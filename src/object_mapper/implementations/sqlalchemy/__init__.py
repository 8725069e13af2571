"""
object_mapper.implementations.sqlalchemy maps nested mappings onto
SQLAlchemy-mapped classes.  Instances are created through the class
manager, so ``__init__`` never runs, and no session is involved.

Synopsis
--------

.. code-block:: python

   from object_mapper.implementations.sqlalchemy import object_mapper_with_defaults

   mapper = object_mapper_with_defaults()
   author = mapper.map({"name": "Brent", "books": [{"title": "Timeline Taxi"}]}, Author)
   session.add(author)

"""
from .core import SQLAFieldDescriptor, SQLATypeDescriptor, describe_sqla_class  # noqa: F401
from .defaults import object_mapper_with_defaults, sqla_descriptor_resolver  # noqa: F401
