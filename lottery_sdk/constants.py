"""Well-known deployment values."""

LOTTERY_7_35_ADDRESS = "0xf73b512f204e739B32D004D7dF3924A8CE30B66d"

LOTTERY_7_35_GRAPH_URI = "https://api.studio.thegraph.com/query/41767/wenwintest/0.2.15"
