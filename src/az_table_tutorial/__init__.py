"""
az_table_tutorial
-----------------
A walkthrough of create/read/update/delete operations on Azure Table Storage.
"""

__version__ = "1.0.0"

from .az_table_tutorial import (
    CustomerEntity,
    Found,
    NotFound,
    PeopleTableClient,
    StorageOperationFailure,
)
from .workflow import (
    PARTITION_NAME,
    main,
    run_workflow,
)

__all__ = [
    "__version__",
    "CustomerEntity",
    "Found",
    "NotFound",
    "PeopleTableClient",
    "StorageOperationFailure",
    "PARTITION_NAME",
    "main",
    "run_workflow",
]
