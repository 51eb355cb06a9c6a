"""
Application layer for the plan engine service.

- ports/: Protocol interfaces for snapshot reads and block persistence
- use_cases/: Orchestration of domain services over the ports
"""
