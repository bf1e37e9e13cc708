"""
High-level use cases for the task API.

Each service module orchestrates repositories to implement business rules
(create task, toggle completion, list with filters, ...). Routers call these
services instead of manipulating the JSON database directly.
"""
