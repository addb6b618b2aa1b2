"""Entity Image Service Package."""

__version__ = "1.0.0"
__author__ = "Bharat kumar"
__description__ = (
    "Serverless profile and listing image service using AWS Lambda, S3, and a relational database"
)

__all__ = ["handlers", "core"]
