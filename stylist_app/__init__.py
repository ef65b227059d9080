"""Application-level configuration and logging for the outfit engine."""
