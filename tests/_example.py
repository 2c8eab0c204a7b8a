import dataclasses

from herald import announce

# Query string sent by Transmission 4.0.5.
QUERY = (
    "info_hash=%E1%B8m%C6%5E%1A%11%DE%16%90%1F%26%98%82%80r%40%C1%7Fr"
    "&peer_id=-TR4050-x4apaio8s299&port=51413&uploaded=0&downloaded=0"
    "&left=278672696&numwant=80&key=0A850B43&compact=1&supportcrypto=1"
    "&event=started"
)
RAW_INFO_HASH = "%E1%B8m%C6%5E%1A%11%DE%16%90%1F%26%98%82%80r%40%C1%7Fr"
INFO_HASH = "e1b86dc65e1a11de16901f269882807240c17f72"
PEER_ID = "-TR4050-x4apaio8s299"
OTHER_PEER_ID = "-qB4630-k8hj0wgej6ch"


def make_announce(peer_id=PEER_ID, ip="127.0.0.1", port=51413, **kwargs):
    params = announce.Announce(INFO_HASH, peer_id, port, ip=ip)
    return dataclasses.replace(params, **kwargs)
