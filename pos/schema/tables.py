"""Declared tables owned by the point of sale plugin"""
from sqlalchemy import (MetaData, Table, Column, BigInteger, Integer, String,
                        Text, Numeric, ForeignKey, text)
from sqlalchemy.dialects import mysql

PRODUCT_LOGS = 'pos_product_logs'
PRODUCT_LOG_COUNTERS = 'pos_product_log_counters'

def _unsigned_bigint():
    return BigInteger().with_variant(mysql.BIGINT(unsigned=True), 'mysql')

def _surrogate_key():
    # SQLite only autoincrements INTEGER primary keys
    return _unsigned_bigint().with_variant(Integer(), 'sqlite')

def _table_options(charset, collate):
    options = {'mysql_engine': 'InnoDB'}
    if charset:
        options['mysql_charset'] = charset
    if collate:
        options['mysql_collate'] = collate
    return options

def declare_tables(prefix='', charset=None, collate=None):
    """Build the product log tables, parents first"""
    metadata = MetaData()
    options = _table_options(charset, collate)
    product_logs_name = f'{prefix}{PRODUCT_LOGS}'

    product_logs = Table(
        product_logs_name, metadata,
        Column('id', _surrogate_key(), primary_key=True, autoincrement=True),
        Column('product_id', _unsigned_bigint(), nullable=False),
        Column('product_title', Text(), nullable=False),
        Column('product_type', String(100), nullable=False),
        Column('product_sku', String(100), nullable=True),
        Column('product_price', Numeric(19, 4), nullable=False, server_default=text('0.0000')),
        Column('product_stock', BigInteger(), nullable=True),
        Column('counter_counts', _unsigned_bigint(), nullable=True, server_default=text('0')),
        **options
    )

    product_log_counters = Table(
        f'{prefix}{PRODUCT_LOG_COUNTERS}', metadata,
        Column('id', _surrogate_key(), primary_key=True, autoincrement=True),
        Column('product_log_id', _unsigned_bigint(),
               ForeignKey(f'{product_logs_name}.id', ondelete='CASCADE'),
               nullable=False),
        Column('counter_id', _unsigned_bigint(), nullable=False),
        **options
    )

    return [product_logs, product_log_counters]
