import enum


def unique():
    number = 0
    while True:
        number += 1
        yield number


class SocketState(enum.Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'


class ProcessState(enum.Enum):
    STOPPED = 'stopped'
    RUNNING = 'running'
    CRASHING = 'crashing'


class QueueState(enum.Enum):
    IDLE = 'idle'
    AWAITING_REPLY = 'awaiting reply'


class Shutdown():
    """
    Intentional-shutdown flag shared by the socket and the process
    lifecycles. Once requested it stays requested.
    """
    def __init__(self):
        self.requested = False

    def request(self):
        self.requested = True

    def __bool__(self):
        return self.requested

    def __str__(self):
        return 'requested' if self.requested else 'not requested'
