class RepositoryError(Exception):
    """Repository storage could not complete an operation."""


class ObjectNotFoundError(RepositoryError):
    def __init__(self, pid: str):
        super().__init__(f"Object not found: {pid}")
        self.pid = pid


class DatastreamNotFoundError(RepositoryError):
    def __init__(self, pid: str, dsid: str):
        super().__init__(f"Datastream {dsid} not found on {pid}")
        self.pid = pid
        self.dsid = dsid
