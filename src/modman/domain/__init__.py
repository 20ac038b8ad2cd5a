"""Domain layer — module model, lifecycle states, errors and reports.

Pure types only: nothing here touches the filesystem or spawns processes.
"""
