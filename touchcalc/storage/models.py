"""Database model for the relational path store."""

from sqlalchemy import Boolean, Column, Integer, String, Text, text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class DBNode(Base):
    """
    A directory or file in the path tree.

        +-----------+---------------+------+-----+---------+
        | Field     | Type          | Null | Key | Default |
        +-----------+---------------+------+-----+---------+
        | path      | varchar(1024) | NO   | PRI | NULL    |
        | parent    | varchar(1024) | NO   | MUL | ''      |
        | is_dir    | tinyint(1)    | NO   |     | 0       |
        | data      | text          | YES  |     | NULL    |
        | version   | int(11)       | NO   |     | 1       |
        +-----------+---------------+------+-----+---------+
    """

    __tablename__ = 'path_nodes'

    path = Column(String(1024), primary_key=True)
    """Separator-joined path. The root is implicit and has no row."""
    parent = Column(String(1024), nullable=False, index=True,
                    server_default=text("''"))
    is_dir = Column(Boolean, nullable=False, default=False)
    data = Column(Text, nullable=True)
    """JSON-encoded payload; ``NULL`` for directories."""
    version = Column(Integer, nullable=False, default=1)
