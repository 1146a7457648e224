"""Database package for the contract payments service."""
from .connection import close_db, get_db, init_db
from .models import Base, Contract, ContractStatus, Job, Profile, ProfileType
from .repositories import ContractRepository, JobRepository, ProfileRepository

__all__ = [
    "Base",
    "Contract",
    "ContractStatus",
    "Job",
    "Profile",
    "ProfileType",
    "ContractRepository",
    "JobRepository",
    "ProfileRepository",
    "close_db",
    "get_db",
    "init_db",
]
