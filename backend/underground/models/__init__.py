from .user import User
from .invite import InviteToken
from .event import Event
