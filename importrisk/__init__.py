"""Weekly importation-risk scoring for vector-borne diseases."""

__version__ = "1.0.0"
