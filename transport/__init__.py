from .osc_udp import OscUdpSink, build_osc_message, osc_type_for

__all__ = ["OscUdpSink", "build_osc_message", "osc_type_for"]
