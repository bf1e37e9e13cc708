"""
Persistence adapters.

`json_storage` owns the JSON file, `query` implements filter/sort/pagination
over record snapshots, and `task_repository` maps task records to entities.
Services depend on the repository rather than touching the JSON file.
"""
