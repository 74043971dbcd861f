"""
sifbuild CLI - build Apptainer containers from recipes, Dockerfiles and images
"""

__version__ = "0.1.0"
