from typing import Any

from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.exceptions import PersistenceError, translate_db_errors
from app.database.models import CollectionRecord, DocumentRecord


class DocumentRepository:
    """Database operations for the doc_collections and docs tables."""

    def create_collection(
        self, collection_name: str, user_resume: str, jd: str
    ) -> CollectionRecord:
        """Insert a document collection holding the raw job inputs."""
        with translate_db_errors("create document collection"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO doc_collections (collection_name, user_resume, jd)
                    VALUES (%s, %s, %s)
                    RETURNING id, collection_name, user_resume, jd, created_at
                    """,
                    (collection_name, user_resume, jd),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise PersistenceError("Document collection was not created")
        return CollectionRecord(
            id=row["id"],
            collection_name=row["collection_name"],
            user_resume=row["user_resume"],
            jd=row["jd"],
            created_at=row["created_at"],
        )

    def create_document(
        self, user_id: int, doc_type: str, content: str, collection_id: int
    ) -> DocumentRecord:
        """Insert one document into an existing collection."""
        with translate_db_errors(f"create {doc_type} document"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO docs (user_id, doc_type, content, collection_id)
                    VALUES (%s, %s, %s, %s)
                    RETURNING id, user_id, doc_type, content, collection_id, created_at
                    """,
                    (user_id, doc_type, content, collection_id),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise PersistenceError(f"{doc_type} document was not created")
        return self._to_document(row)

    def find_collections_for_user(self, user_id: int) -> list[CollectionRecord]:
        """Return every collection holding at least one of the user's documents."""
        with translate_db_errors(f"list collections of user {user_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT c.id, c.collection_name, c.user_resume, c.jd, c.created_at
                    FROM doc_collections c
                    WHERE EXISTS (
                        SELECT 1 FROM docs d
                        WHERE d.collection_id = c.id AND d.user_id = %s
                    )
                    ORDER BY c.created_at DESC
                    """,
                    (user_id,),
                )
                collection_rows = cur.fetchall()
                cur.execute(
                    """
                    SELECT id, user_id, doc_type, content, collection_id, created_at
                    FROM docs
                    WHERE collection_id = ANY(%s)
                    ORDER BY id
                    """,
                    ([row["id"] for row in collection_rows],),
                )
                doc_rows = cur.fetchall()

        collections = {
            row["id"]: CollectionRecord(
                id=row["id"],
                collection_name=row["collection_name"],
                user_resume=row["user_resume"],
                jd=row["jd"],
                created_at=row["created_at"],
            )
            for row in collection_rows
        }
        for row in doc_rows:
            collections[row["collection_id"]].docs.append(self._to_document(row))
        return list(collections.values())

    @staticmethod
    def _to_document(row: dict[str, Any]) -> DocumentRecord:
        return DocumentRecord(
            id=row["id"],
            user_id=row["user_id"],
            doc_type=row["doc_type"],
            content=row["content"],
            collection_id=row["collection_id"],
            created_at=row["created_at"],
        )
