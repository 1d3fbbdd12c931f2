"""Configuration — pydantic section models, unified settings, logging."""
