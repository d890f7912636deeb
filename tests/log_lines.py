"""mosquitto -v 日志行构造（测试用）"""


def connect_line(client_id, ts="1714550400"):
    return f"{ts}: Sending CONNACK to {client_id} (0, 0)\n"


def disconnect_line(client_id, ts="1714550400"):
    return f"{ts}: Received DISCONNECT from {client_id}\n"


def socket_error_line(client_id, ts="1714550400"):
    return f"{ts}: Socket error on client {client_id}, disconnecting.\n"


def subscribe_header(client_id, ts="1714550400"):
    return f"{ts}: Received SUBSCRIBE from {client_id}\n"


def topic_line(topic, qos=0):
    return f"\t{topic} (QoS {qos})\n"


def publish_line(client_id, topic, size, ts="1714550400"):
    return (f"{ts}: Received PUBLISH from {client_id} "
            f"(d0, q0, r0, m0, '{topic}', ... ({size} bytes))\n")
