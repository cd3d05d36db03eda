import pycouchdb

from postmill.settings import Settings, settings


def connect(config: Settings):
    server = pycouchdb.Server(config.couchdb_url)
    return server.database(config.COUCHDB_DATABASE)


def get_couch():
    """
    Open the LiveSync database that holds posts/ and pages/.
    Called per request to avoid import-time connections.
    """
    return connect(settings)
