# fea3d/io - job files in, CSV / report files out
"""
I/O collaborators of the solver. Nothing in here takes part in the
computation: ``config`` builds the inputs of ``fea3d.solve`` from a JSON
job file, ``export`` serializes a finished Summary.
"""

from .config import JobFile, JobInput, load_job_file
from .export import save_summary, write_csv, write_report

__all__ = ['JobFile', 'JobInput', 'load_job_file', 'save_summary', 'write_csv', 'write_report']
