"""Student careers API package.

This package exposes the service, repository and model modules used by
the FastAPI application. Students enroll in careers, track the approval
status of each career subject and look up professorship schedules.
"""
