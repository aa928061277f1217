from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence

from pythonosc.osc_message import OscMessage
from pythonosc.osc_message_builder import OscMessageBuilder
from pythonosc.udp_client import SimpleUDPClient

from osc_core.message_models import BoolValue, FloatValue, IntValue, StringValue, TypedValue

logger = logging.getLogger(__name__)

# OSC 'i' is a signed 32-bit int; wider values go out as 'h' (int64).
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def osc_type_for(arg: TypedValue) -> str:
    if isinstance(arg, BoolValue):
        return OscMessageBuilder.ARG_TYPE_TRUE if arg.value else OscMessageBuilder.ARG_TYPE_FALSE
    if isinstance(arg, IntValue):
        if _INT32_MIN <= int(arg.value) <= _INT32_MAX:
            return OscMessageBuilder.ARG_TYPE_INT
        return OscMessageBuilder.ARG_TYPE_INT64
    if isinstance(arg, FloatValue):
        return OscMessageBuilder.ARG_TYPE_FLOAT
    if isinstance(arg, StringValue):
        return OscMessageBuilder.ARG_TYPE_STRING
    raise TypeError(f"unsupported argument {arg!r}")


def build_osc_message(path: str, args: Sequence[TypedValue]) -> OscMessage:
    builder = OscMessageBuilder(address=path)
    for arg in args:
        builder.add_arg(arg.value, osc_type_for(arg))
    return builder.build()


class OscUdpSink:
    """
    Fire-and-forget OSC sender:
    - one UDP client per target host/port
    - send(path, args) encodes typed args and transmits a single datagram
    """

    def __init__(self, host: str, port: int, client: Optional[Any] = None):
        self.host = str(host)
        self.port = int(port)
        self._client = client if client is not None else SimpleUDPClient(self.host, self.port)

    def send(self, path: str, args: Sequence[TypedValue]) -> None:
        logger.debug("Sending OSC %s:%s %s", self.host, self.port, path)
        logger.debug("Sending Args %s", json.dumps([a.to_dict() for a in args]))
        self._client.send(build_osc_message(path, args))

    def close(self) -> None:
        """
        SimpleUDPClient has no public close(); its socket lives on the private
        `_sock` attribute (python-osc 1.8 and later). Injected clients without one
        are left alone.
        """
        sock = getattr(self._client, "_sock", None)
        if sock is None:
            return
        try:
            sock.close()
        except OSError as e:
            logger.debug("closing OSC socket failed: %s", e)
