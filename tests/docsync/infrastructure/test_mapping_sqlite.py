import sqlite3
import unittest

from src.docsync.infrastructure.mapping_sqlite import SQLiteCollectionMappingRepository
from tests.utils.tempdir import managed_temp_dir


class CollectionMappingSQLiteTests(unittest.TestCase):
    def test_create_list_and_get_mappings(self):
        with managed_temp_dir("mapping_basic") as tmp:
            repo = SQLiteCollectionMappingRepository(tmp / "mappings.db")
            try:
                self.assertEqual(repo.list_mappings(), [])

                created = repo.create_mapping("Human_Resources", ["kc-1", " kc-2 "])
                repo.create_mapping("Engineering", ["kc-3,kc-4", "kc-3"])

                self.assertEqual(created.source_collection, "Human_Resources")
                self.assertEqual(created.knowledge_collection_ids, ("kc-1", "kc-2"))
                self.assertTrue(created.created_at)
                self.assertEqual(
                    repo.get_collection_mappings(),
                    {"Human_Resources": ["kc-1", "kc-2"], "Engineering": ["kc-3", "kc-4"]},
                )
                self.assertEqual([m.source_collection for m in repo.list_mappings()], ["Human_Resources", "Engineering"])
            finally:
                repo.close()

    def test_duplicate_source_collection_raises(self):
        with managed_temp_dir("mapping_duplicate") as tmp:
            repo = SQLiteCollectionMappingRepository(tmp / "mappings.db")
            try:
                repo.create_mapping("Human_Resources", ["kc-1"])
                with self.assertRaises(sqlite3.IntegrityError):
                    repo.create_mapping("Human_Resources", ["kc-2"])
                self.assertEqual(repo.get_collection_mappings(), {"Human_Resources": ["kc-1"]})
            finally:
                repo.close()

    def test_invalid_input_raises_value_error(self):
        with managed_temp_dir("mapping_invalid") as tmp:
            repo = SQLiteCollectionMappingRepository(tmp / "mappings.db")
            try:
                with self.assertRaises(ValueError):
                    repo.create_mapping("  ", ["kc-1"])
                with self.assertRaises(ValueError):
                    repo.create_mapping("Engineering", [" ", ","])
            finally:
                repo.close()

    def test_delete_mapping(self):
        with managed_temp_dir("mapping_delete") as tmp:
            repo = SQLiteCollectionMappingRepository(tmp / "mappings.db")
            try:
                repo.create_mapping("Engineering", ["kc-3"])
                self.assertTrue(repo.delete_mapping("Engineering"))
                self.assertFalse(repo.delete_mapping("Engineering"))
                self.assertEqual(repo.get_collection_mappings(), {})
            finally:
                repo.close()

    def test_mappings_persist_across_connections(self):
        with managed_temp_dir("mapping_persist") as tmp:
            db_path = tmp / "nested" / "mappings.db"
            repo = SQLiteCollectionMappingRepository(db_path)
            repo.create_mapping("Engineering", ["kc-3"])
            repo.close()

            reopened = SQLiteCollectionMappingRepository(db_path)
            try:
                self.assertEqual(reopened.get_collection_mappings(), {"Engineering": ["kc-3"]})
            finally:
                reopened.close()
