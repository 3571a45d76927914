"""Create-or-alter reconciliation of declared tables"""
from contextlib import contextmanager
from alembic.autogenerate import compare_metadata
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import Column, Integer, Numeric, String, inspect, text
from pos import db
import logging

logger = logging.getLogger(__name__)

class SchemaManager:
    """Bring live tables in line with their declared definitions.

    Missing tables are created, missing columns are added and columns whose
    type or nullability differ are altered. Columns and tables that exist in
    the database but not in the declaration are left alone.
    """

    def __init__(self, engine=None):
        self._engine = engine

    @property
    def engine(self):
        return self._engine if self._engine is not None else db.engine

    def table_exists(self, table_name):
        """Check if a table exists"""
        return inspect(self.engine).has_table(table_name)

    def get_columns(self, table_name):
        """Map column names to their reflected definitions"""
        return {column['name']: column for column in inspect(self.engine).get_columns(table_name)}

    def diff(self, table, connection):
        """Compare one declared table against the database"""
        def include_name(name, type_, parent_names):
            if type_ == 'table':
                return name == table.name
            return True

        def include_object(obj, name, type_, reflected, compare_to):
            if type_ == 'table':
                return name == table.name
            return True

        context = MigrationContext.configure(connection, opts={
            'compare_type': True,
            'include_name': include_name,
            'include_object': include_object,
        })
        return context, compare_metadata(context, table.metadata)

    def reconcile(self, table):
        """Create the table or alter it to match its declaration.

        Returns the list of changes applied; an empty list means the table
        already matched.
        """
        applied = []
        try:
            with self.engine.connect() as connection, \
                    self._foreign_keys_off(connection), connection.begin():
                context, diffs = self.diff(table, connection)
                operations = Operations(context)

                for entry in diffs:
                    # Column modifications are grouped in nested lists
                    if isinstance(entry, list):
                        applied.extend(self._alter_columns(operations, entry))
                        continue

                    action = entry[0]
                    if action == 'add_table':
                        entry[1].create(bind=connection, checkfirst=True)
                        logger.info(f"Created table {entry[1].name}")
                        applied.append(('add_table', entry[1].name))
                    elif action == 'add_column':
                        _, schema, table_name, column = entry
                        operations.add_column(table_name, self._copy_column(column), schema=schema)
                        logger.info(f"Added column {table_name}.{column.name}")
                        applied.append(('add_column', table_name, column.name))
                    else:
                        logger.debug(f"Ignoring schema difference on {table.name}: {action}")
        except Exception as e:
            logger.error(f"Error reconciling table {table.name}: {str(e)}")
            raise

        if not applied:
            logger.debug(f"Table {table.name} already up to date")
        return applied

    @contextmanager
    def _foreign_keys_off(self, connection):
        """Suspend SQLite foreign keys so batch table rebuilds do not cascade"""
        if connection.dialect.name != "sqlite":
            yield
            return
        # The pragma is ignored inside a transaction
        connection.exec_driver_sql("PRAGMA foreign_keys=OFF")
        connection.commit()
        try:
            yield
        finally:
            connection.exec_driver_sql("PRAGMA foreign_keys=ON")
            connection.commit()

    def _alter_columns(self, operations, modifications):
        """Apply type and nullability changes for a single column"""
        changes = {}
        schema = table_name = column_name = None
        for modification in modifications:
            action, schema, table_name, column_name, existing = modification[:5]
            old_value, new_value = modification[5], modification[6]
            if action == 'modify_type':
                changes['type_'] = new_value
                changes['existing_type'] = old_value
                changes.setdefault('existing_nullable', existing.get('existing_nullable'))
            elif action == 'modify_nullable':
                changes['nullable'] = new_value
                changes.setdefault('existing_type', existing.get('existing_type'))
            else:
                logger.debug(f"Ignoring {action} on {table_name}.{column_name}")

        if not changes:
            return []

        with operations.batch_alter_table(table_name, schema=schema) as batch:
            batch.alter_column(column_name, **changes)
        logger.info(f"Altered column {table_name}.{column_name}")
        return [('alter_column', table_name, column_name)]

    @staticmethod
    def _copy_column(column):
        server_default = column.server_default.arg if column.server_default is not None else None
        if server_default is None and not column.nullable and not column.primary_key:
            # Existing rows need a value for the new NOT NULL column
            server_default = SchemaManager._implicit_default(column.type)
        return Column(column.name, column.type, nullable=column.nullable,
                      server_default=server_default)

    @staticmethod
    def _implicit_default(type_):
        """Zero value used to fill a NOT NULL column added to a populated table"""
        if isinstance(type_, (Integer, Numeric)):
            return text("0")
        if isinstance(type_, String):
            return ""
        return None
