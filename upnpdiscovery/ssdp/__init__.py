from .discover import SsdpDiscover, parse_ssdp_headers, search_message
from .ssdp_socket import SsdpSocket
