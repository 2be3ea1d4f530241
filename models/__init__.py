"""
Persistence layer: SQLAlchemy models plus the process-wide DBStorage.

`storage` is created here and bound to a database by api.create_app()
(storage.reload(url)); scripts can call storage.reload() directly.
"""
from models.db_storage import DBStorage

storage = DBStorage()
