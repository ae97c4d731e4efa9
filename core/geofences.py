"""
Named map regions.  The terminal only needs each region's key and the
centre of its bounding box; the host's map layer owns the visuals.
"""
from typing import NamedTuple, Optional


class Region(NamedTuple):
    key:     str
    min_lng: float
    max_lng: float
    min_lat: float
    max_lat: float

    @property
    def center(self) -> tuple[float, float]:
        return ((self.min_lng + self.max_lng) / 2, (self.min_lat + self.max_lat) / 2)


GEOFENCES: tuple[Region, ...] = (
    Region("area51",              -115.95, -115.45,  37.05,  37.45),
    Region("roswell",             -104.70, -104.30,  33.20,  33.60),
    Region("rainier",             -121.95, -121.45,  46.60,  47.00),
    Region("yosemite",            -119.85, -119.25,  37.60,  38.00),
    Region("rmnp",                -105.90, -105.40,  40.30,  40.60),
    Region("white-sands",         -106.60, -106.10,  32.60,  32.90),
    Region("ksc",                  -80.80,  -80.50,  28.40,  28.70),
    Region("silicon-valley",      -122.30, -121.80,  37.20,  37.60),
    Region("dc-pentagon",          -77.12,  -77.01,  38.84,  38.92),
    Region("boston",               -71.18,  -71.03,  42.32,  42.42),
    Region("lancaster",            -76.40,  -76.20,  40.00,  40.08),
    Region("philadelphia",         -75.30,  -75.00,  39.85,  40.10),
    Region("el-segundo",          -118.45, -118.32,  33.88,  33.95),
    Region("state-college",        -78.00,  -77.60,  40.70,  40.90),
    Region("bletchley-park",        -0.85,   -0.62,  51.90,  52.05),
    Region("cern",                   5.95,    6.20,  46.15,  46.32),
    Region("starbase",             -97.30,  -96.90,  25.90,  26.10),
    Region("vandenberg",          -120.80, -120.40,  34.50,  34.90),
    Region("jpl-pasadena",        -118.25, -118.05,  34.12,  34.25),
    Region("mojave",              -118.25, -118.05,  34.95,  35.15),
    Region("nyc-midtown",          -74.02,  -73.95,  40.70,  40.78),
    Region("seattle",             -122.45, -122.25,  47.55,  47.70),
    Region("austin",               -97.90,  -97.60,  30.17,  30.42),
    Region("denver",              -105.10, -104.75,  39.60,  39.85),
    Region("houston-jsc",          -95.20,  -95.00,  29.50,  29.70),
    Region("norad-cheyenne",      -104.90, -104.80,  38.70,  38.76),
    Region("pine-gap-au",          133.67,  133.90, -23.90, -23.70),
)


def find_region(key: str, regions=GEOFENCES) -> Optional[Region]:
    key = key.lower()
    return next((r for r in regions if r.key == key), None)
