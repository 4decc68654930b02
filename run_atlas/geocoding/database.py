"""Compiled-in country bounding boxes and major-city markers.

Lightweight, offline geography: each country is an axis-aligned lat/lon box
plus an ordered list of its major cities. Declaration order matters because
lookups take the first box that contains a point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, lat: float, lon: float) -> bool:
        return (
            self.min_lat <= lat <= self.max_lat
            and self.min_lon <= lon <= self.max_lon
        )


@dataclass(frozen=True, slots=True)
class CityMarker:
    name: str
    lat: float
    lon: float

    @property
    def coordinate(self) -> Tuple[float, float]:
        return self.lat, self.lon


@dataclass(frozen=True, slots=True)
class CountryRegion:
    name: str
    code: str
    bounds: BoundingBox
    cities: Tuple[CityMarker, ...]


def _country(
    name: str,
    code: str,
    bounds: Tuple[float, float, float, float],
    cities: Tuple[Tuple[str, float, float], ...],
) -> CountryRegion:
    return CountryRegion(
        name=name,
        code=code,
        bounds=BoundingBox(*bounds),
        cities=tuple(CityMarker(*city) for city in cities),
    )


COUNTRIES: Tuple[CountryRegion, ...] = (
    # North America
    _country(
        "United States",
        "US",
        (24.396308, 71.538800, -179.148909, -66.885444),
        (
            ("New York", 40.7128, -74.0060),
            ("Los Angeles", 34.0522, -118.2437),
            ("Chicago", 41.8781, -87.6298),
            ("Houston", 29.7604, -95.3698),
            ("Phoenix", 33.4484, -112.0740),
            ("Philadelphia", 39.9526, -75.1652),
            ("San Antonio", 29.4241, -98.4936),
            ("San Diego", 32.7157, -117.1611),
            ("Dallas", 32.7767, -96.7970),
            ("San Francisco", 37.7749, -122.4194),
            ("Austin", 30.2672, -97.7431),
            ("Jacksonville", 30.3322, -81.6557),
            ("Fort Worth", 32.7555, -97.3308),
            ("Columbus", 39.9612, -82.9988),
            ("Charlotte", 35.2271, -80.8431),
            ("Seattle", 47.6062, -122.3321),
            ("Denver", 39.7392, -104.9903),
            ("Boston", 42.3601, -71.0589),
            ("Nashville", 36.1627, -86.7816),
            ("Portland", 45.5152, -122.6784),
            ("Las Vegas", 36.1699, -115.1398),
            ("Miami", 25.7617, -80.1918),
        ),
    ),
    _country(
        "Canada",
        "CA",
        (41.676555, 83.110626, -141.00187, -52.648099),
        (
            ("Toronto", 43.6532, -79.3832),
            ("Montreal", 45.5017, -73.5673),
            ("Vancouver", 49.2827, -123.1207),
            ("Calgary", 51.0447, -114.0719),
            ("Ottawa", 45.4215, -75.6972),
            ("Edmonton", 53.5461, -113.4938),
            ("Mississauga", 43.5890, -79.6441),
            ("Winnipeg", 49.8951, -97.1384),
            ("Quebec City", 46.8139, -71.2080),
            ("Hamilton", 43.2557, -79.8711),
        ),
    ),
    _country(
        "Mexico",
        "MX",
        (14.532866, 32.716759, -118.453949, -86.703392),
        (
            ("Mexico City", 19.4326, -99.1332),
            ("Guadalajara", 20.6597, -103.3496),
            ("Monterrey", 25.6866, -100.3161),
            ("Cancun", 21.1619, -86.8515),
            ("Tijuana", 32.5149, -117.0382),
        ),
    ),
    # Europe
    _country(
        "Germany",
        "DE",
        (47.270111, 55.058347, 5.866944, 15.041896),
        (
            ("Berlin", 52.5200, 13.4050),
            ("Munich", 48.1351, 11.5820),
            ("Hamburg", 53.5511, 9.9937),
            ("Cologne", 50.9375, 6.9603),
            ("Frankfurt", 50.1109, 8.6821),
            ("Stuttgart", 48.7758, 9.1829),
            ("Dusseldorf", 51.2277, 6.7735),
            ("Dortmund", 51.5136, 7.4653),
            ("Essen", 51.4556, 7.0116),
            ("Leipzig", 51.3397, 12.3731),
        ),
    ),
    _country(
        "France",
        "FR",
        (41.303, 51.124, -5.225, 9.662),
        (
            ("Paris", 48.8566, 2.3522),
            ("Marseille", 43.2965, 5.3698),
            ("Lyon", 45.7640, 4.8357),
            ("Toulouse", 43.6047, 1.4442),
            ("Nice", 43.7102, 7.2620),
            ("Nantes", 47.2184, -1.5536),
            ("Strasbourg", 48.5734, 7.7521),
            ("Montpellier", 43.6108, 3.8767),
            ("Bordeaux", 44.8378, -0.5792),
            ("Lille", 50.6292, 3.0573),
        ),
    ),
    _country(
        "United Kingdom",
        "GB",
        (49.674, 61.061, -8.649, 1.768),
        (
            ("London", 51.5074, -0.1278),
            ("Birmingham", 52.4862, -1.8904),
            ("Glasgow", 55.8642, -4.2518),
            ("Liverpool", 53.4084, -2.9916),
            ("Bristol", 51.4545, -2.5879),
            ("Manchester", 53.4808, -2.2426),
            ("Sheffield", 53.3811, -1.4701),
            ("Leeds", 53.8008, -1.5491),
            ("Edinburgh", 55.9533, -3.1883),
            ("Leicester", 52.6369, -1.1398),
        ),
    ),
    _country(
        "Spain",
        "ES",
        (35.173, 43.791, -9.301, 4.327),
        (
            ("Madrid", 40.4168, -3.7038),
            ("Barcelona", 41.3851, 2.1734),
            ("Valencia", 39.4699, -0.3763),
            ("Seville", 37.3891, -5.9845),
            ("Zaragoza", 41.6488, -0.8891),
            ("Malaga", 36.7213, -4.4214),
            ("Murcia", 37.9922, -1.1307),
            ("Palma", 39.5696, 2.6502),
            ("Las Palmas", 28.1248, -15.4300),
            ("Bilbao", 43.2627, -2.9253),
        ),
    ),
    _country(
        "Italy",
        "IT",
        (35.493, 47.092, 6.627, 18.521),
        (
            ("Rome", 41.9028, 12.4964),
            ("Milan", 45.4642, 9.1900),
            ("Naples", 40.8518, 14.2681),
            ("Turin", 45.0703, 7.6869),
            ("Palermo", 38.1157, 13.3615),
            ("Genoa", 44.4056, 8.9463),
            ("Bologna", 44.4949, 11.3426),
            ("Florence", 43.7696, 11.2558),
            ("Bari", 41.1171, 16.8719),
            ("Catania", 37.5079, 15.0830),
        ),
    ),
    _country(
        "Netherlands",
        "NL",
        (50.803, 53.555, 3.314, 7.227),
        (
            ("Amsterdam", 52.3676, 4.9041),
            ("Rotterdam", 51.9244, 4.4777),
            ("The Hague", 52.0705, 4.3007),
            ("Utrecht", 52.0907, 5.1214),
            ("Eindhoven", 51.4416, 5.4697),
            ("Tilburg", 51.5555, 5.0913),
            ("Groningen", 53.2194, 6.5665),
            ("Almere", 52.3508, 5.2647),
            ("Breda", 51.5719, 4.7683),
            ("Nijmegen", 51.8426, 5.8518),
        ),
    ),
    _country(
        "Switzerland",
        "CH",
        (45.818, 47.808, 5.957, 10.492),
        (
            ("Zurich", 47.3769, 8.5417),
            ("Geneva", 46.2044, 6.1432),
            ("Basel", 47.5596, 7.5886),
            ("Lausanne", 46.5197, 6.6323),
            ("Bern", 46.9481, 7.4474),
            ("Winterthur", 47.5034, 8.7240),
            ("Lucerne", 47.0502, 8.3093),
            ("St. Gallen", 47.4245, 9.3767),
            ("Lugano", 46.0037, 8.9511),
            ("Biel", 47.1368, 7.2448),
        ),
    ),
    _country(
        "Austria",
        "AT",
        (46.372, 49.021, 9.531, 17.161),
        (
            ("Vienna", 48.2082, 16.3738),
            ("Graz", 47.0707, 15.4395),
            ("Linz", 48.3069, 14.2858),
            ("Salzburg", 47.8095, 13.0550),
            ("Innsbruck", 47.2692, 11.4041),
        ),
    ),
    _country(
        "Belgium",
        "BE",
        (49.497, 51.505, 2.546, 6.408),
        (
            ("Brussels", 50.8503, 4.3517),
            ("Antwerp", 51.2194, 4.4025),
            ("Ghent", 51.0543, 3.7174),
            ("Charleroi", 50.4108, 4.4446),
            ("Liege", 50.6326, 5.5797),
        ),
    ),
    _country(
        "Denmark",
        "DK",
        (54.559, 57.751, 8.075, 15.158),
        (
            ("Copenhagen", 55.6761, 12.5683),
            ("Aarhus", 56.1629, 10.2039),
            ("Odense", 55.4038, 10.4024),
            ("Aalborg", 57.0488, 9.9217),
            ("Esbjerg", 55.4667, 8.4500),
        ),
    ),
    _country(
        "Sweden",
        "SE",
        (55.337, 69.060, 11.118, 24.167),
        (
            ("Stockholm", 59.3293, 18.0686),
            ("Gothenburg", 57.7089, 11.9746),
            ("Malmo", 55.6050, 13.0038),
            ("Uppsala", 59.8586, 17.6389),
            ("Vasteras", 59.6099, 16.5448),
        ),
    ),
    _country(
        "Norway",
        "NO",
        (57.977, 80.757, 4.650, 31.078),
        (
            ("Oslo", 59.9139, 10.7522),
            ("Bergen", 60.3913, 5.3221),
            ("Trondheim", 63.4305, 10.3951),
            ("Stavanger", 58.9700, 5.7331),
            ("Baerum", 59.8939, 10.5464),
        ),
    ),
    _country(
        "Finland",
        "FI",
        (59.808, 70.092, 20.556, 31.587),
        (
            ("Helsinki", 60.1699, 24.9384),
            ("Espoo", 60.2055, 24.6559),
            ("Tampere", 61.4991, 23.7871),
            ("Vantaa", 60.2934, 25.0378),
            ("Oulu", 65.0121, 25.4651),
        ),
    ),
    _country(
        "Poland",
        "PL",
        (49.006, 54.836, 14.123, 24.150),
        (
            ("Warsaw", 52.2297, 21.0122),
            ("Krakow", 50.0647, 19.9450),
            ("Lodz", 51.7592, 19.4560),
            ("Wroclaw", 51.1079, 17.0385),
            ("Poznan", 52.4064, 16.9252),
            ("Gdansk", 54.3520, 18.6466),
            ("Szczecin", 53.4285, 14.5528),
            ("Bydgoszcz", 53.1235, 18.0084),
            ("Lublin", 51.2465, 22.5684),
            ("Katowice", 50.2649, 19.0238),
        ),
    ),
    _country(
        "Czech Republic",
        "CZ",
        (48.551, 51.055, 12.096, 18.877),
        (
            ("Prague", 50.0755, 14.4378),
            ("Brno", 49.1951, 16.6068),
            ("Ostrava", 49.8209, 18.2625),
            ("Plzen", 49.7384, 13.3736),
            ("Liberec", 50.7663, 15.0543),
        ),
    ),
    _country(
        "Hungary",
        "HU",
        (45.737, 48.585, 16.114, 22.906),
        (
            ("Budapest", 47.4979, 19.0402),
            ("Debrecen", 47.5316, 21.6273),
            ("Szeged", 46.2530, 20.1414),
            ("Miskolc", 48.1034, 20.7784),
            ("Pecs", 46.0727, 18.2330),
        ),
    ),
    _country(
        "Portugal",
        "PT",
        (36.838, 42.280, -9.526, -6.189),
        (
            ("Lisbon", 38.7223, -9.1393),
            ("Porto", 41.1579, -8.6291),
            ("Vila Nova de Gaia", 41.1239, -8.6118),
            ("Amadora", 38.7538, -9.2342),
            ("Braga", 41.5518, -8.4229),
        ),
    ),
    _country(
        "Slovenia",
        "SI",
        (45.421, 46.877, 13.375, 16.610),
        (
            ("Ljubljana", 46.0569, 14.5058),
            ("Maribor", 46.5547, 15.6459),
            ("Celje", 46.2311, 15.2683),
            ("Kranj", 46.2395, 14.3555),
            ("Velenje", 46.3590, 15.1116),
        ),
    ),
    _country(
        "Iceland",
        "IS",
        (63.236, 66.574, -24.533, -13.495),
        (
            ("Reykjavik", 64.1466, -21.9426),
            ("Kopavogur", 64.1125, -21.9110),
            ("Hafnarfjordur", 64.0671, -21.9506),
            ("Akureyri", 65.6835, -18.0878),
            ("Reykjanesbaer", 63.9942, -22.5541),
        ),
    ),
    # Asia-Pacific
    _country(
        "Japan",
        "JP",
        (24.045, 45.522, 122.934, 153.987),
        (
            ("Tokyo", 35.6762, 139.6503),
            ("Yokohama", 35.4437, 139.6380),
            ("Osaka", 34.6937, 135.5023),
            ("Nagoya", 35.1815, 136.9066),
            ("Sapporo", 43.0642, 141.3469),
            ("Fukuoka", 33.5904, 130.4017),
            ("Kobe", 34.6901, 135.1956),
            ("Kyoto", 35.0116, 135.7681),
            ("Kawasaki", 35.5308, 139.7029),
            ("Saitama", 35.8617, 139.6455),
        ),
    ),
    _country(
        "Australia",
        "AU",
        (-43.634, -10.683, 113.338, 153.569),
        (
            ("Sydney", -33.8688, 151.2093),
            ("Melbourne", -37.8136, 144.9631),
            ("Brisbane", -27.4698, 153.0251),
            ("Perth", -31.9505, 115.8605),
            ("Adelaide", -34.9285, 138.6007),
            ("Gold Coast", -28.0167, 153.4000),
            ("Newcastle", -32.9267, 151.7789),
            ("Canberra", -35.2809, 149.1300),
            ("Sunshine Coast", -26.6500, 153.0667),
            ("Wollongong", -34.4278, 150.8931),
        ),
    ),
    _country(
        "New Zealand",
        "NZ",
        (-47.286, -34.389, 166.509, 178.517),
        (
            ("Auckland", -36.8485, 174.7633),
            ("Wellington", -41.2865, 174.7762),
            ("Christchurch", -43.5321, 172.6362),
            ("Hamilton", -37.7870, 175.2793),
            ("Tauranga", -37.6878, 176.1651),
        ),
    ),
    _country(
        "Singapore",
        "SG",
        (1.158, 1.470, 103.594, 104.089),
        (("Singapore", 1.3521, 103.8198),),
    ),
    _country(
        "South Korea",
        "KR",
        (33.190, 38.612, 125.887, 129.584),
        (
            ("Seoul", 37.5665, 126.9780),
            ("Busan", 35.1796, 129.0756),
            ("Incheon", 37.4563, 126.7052),
            ("Daegu", 35.8714, 128.6014),
            ("Daejeon", 36.3504, 127.3845),
        ),
    ),
    _country(
        "China",
        "CN",
        (18.197, 53.561, 73.499, 135.095),
        (
            ("Beijing", 39.9042, 116.4074),
            ("Shanghai", 31.2304, 121.4737),
            ("Guangzhou", 23.1291, 113.2644),
            ("Shenzhen", 22.5431, 114.0579),
            ("Chongqing", 29.4316, 106.9123),
            ("Tianjin", 39.3434, 117.3616),
            ("Wuhan", 30.5928, 114.3055),
            ("Dongguan", 23.0489, 113.7447),
            ("Chengdu", 30.5728, 104.0668),
            ("Nanjing", 32.0603, 118.7969),
        ),
    ),
    _country(
        "India",
        "IN",
        (8.068, 37.097, 68.133, 97.395),
        (
            ("Mumbai", 19.0760, 72.8777),
            ("Delhi", 28.7041, 77.1025),
            ("Bangalore", 12.9716, 77.5946),
            ("Hyderabad", 17.3850, 78.4867),
            ("Ahmedabad", 23.0225, 72.5714),
            ("Chennai", 13.0827, 80.2707),
            ("Kolkata", 22.5726, 88.3639),
            ("Surat", 21.1702, 72.8311),
            ("Pune", 18.5204, 73.8567),
            ("Jaipur", 26.9124, 75.7873),
        ),
    ),
    # Middle East & Africa
    _country(
        "United Arab Emirates",
        "AE",
        (22.633, 26.084, 51.583, 56.397),
        (
            ("Dubai", 25.2048, 55.2708),
            ("Abu Dhabi", 24.2992, 54.6970),
            ("Sharjah", 25.3463, 55.4209),
            ("Al Ain", 24.2075, 55.7447),
            ("Ajman", 25.4052, 55.5136),
        ),
    ),
    _country(
        "Saudi Arabia",
        "SA",
        (16.002, 32.154, 34.495, 55.667),
        (
            ("Riyadh", 24.7136, 46.6753),
            ("Jeddah", 21.3099, 39.1925),
            ("Mecca", 21.3891, 39.8579),
            ("Medina", 24.5247, 39.5692),
            ("Dammam", 26.3927, 49.9777),
        ),
    ),
    _country(
        "Israel",
        "IL",
        (29.496, 33.341, 34.267, 35.896),
        (
            ("Jerusalem", 31.7683, 35.2137),
            ("Tel Aviv", 32.0853, 34.7818),
            ("Haifa", 32.7940, 34.9896),
            ("Rishon LeZion", 31.9730, 34.8065),
            ("Petah Tikva", 32.0878, 34.8878),
        ),
    ),
    _country(
        "South Africa",
        "ZA",
        (-34.839, -22.125, 16.344, 32.895),
        (
            ("Johannesburg", -26.2041, 28.0473),
            ("Cape Town", -33.9249, 18.4241),
            ("Durban", -29.8587, 31.0218),
            ("Pretoria", -25.7479, 28.2293),
            ("Port Elizabeth", -33.9608, 25.6022),
        ),
    ),
    # South America
    _country(
        "Brazil",
        "BR",
        (-33.751, 5.272, -73.985, -28.847),
        (
            ("Sao Paulo", -23.5558, -46.6396),
            ("Rio de Janeiro", -22.9068, -43.1729),
            ("Brasilia", -15.8267, -47.9218),
            ("Salvador", -12.9714, -38.5014),
            ("Fortaleza", -3.7319, -38.5267),
            ("Belo Horizonte", -19.8157, -43.9542),
            ("Manaus", -3.1190, -60.0217),
            ("Curitiba", -25.4284, -49.2733),
            ("Recife", -8.0476, -34.8770),
            ("Porto Alegre", -30.0346, -51.2177),
        ),
    ),
    _country(
        "Argentina",
        "AR",
        (-55.061, -21.781, -73.560, -53.591),
        (
            ("Buenos Aires", -34.6118, -58.3960),
            ("Cordoba", -31.4201, -64.1888),
            ("Rosario", -32.9442, -60.6505),
            ("Mendoza", -32.8908, -68.8272),
            ("La Plata", -34.9215, -57.9545),
        ),
    ),
    _country(
        "Chile",
        "CL",
        (-55.926, -17.507, -109.454, -66.417),
        (
            ("Santiago", -33.4489, -70.6693),
            ("Valparaiso", -33.0458, -71.6197),
            ("Concepcion", -36.8270, -73.0498),
            ("La Serena", -29.9027, -71.2519),
            ("Antofagasta", -23.6509, -70.3975),
        ),
    ),
)


def find_country(
    lat: float,
    lon: float,
    countries: Tuple[CountryRegion, ...] = COUNTRIES,
) -> Optional[CountryRegion]:
    """Return the first region whose bounding box contains the point."""

    for country in countries:
        if country.bounds.contains(lat, lon):
            return country
    return None


__all__ = [
    "BoundingBox",
    "CityMarker",
    "CountryRegion",
    "COUNTRIES",
    "find_country",
]
