# -*- coding: utf-8 -*-
"""
Created on Mon Oct 12 09:02:11 2026
"""


from setuptools import setup, find_packages

setup(
    name="obialandcover",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        'numpy',
        'pandas',
        'geopandas',
        'shapely',
        'pyproj',
        'pyyaml',
        'scikit-learn',
        'joblib',
        'matplotlib>=3.5',
        'loguru',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['obialandcover=obialandcover.run_pipeline:main'],
    },
    description="Level 1 object-based land cover classification of segmented image objects",
    url="https://github.com/yourusername/your-repo",
)
