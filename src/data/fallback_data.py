"""
Fallback Review Datasets
========================

Fixed raw payloads served when a provider is unreachable, misconfigured or
returns a malformed envelope. Each provider has its own dataset, in that
provider's raw shape, so it flows through the regular normalizer.

The data is deterministic (absolute timestamps only) so downstream tests
and demos always see the same batch.
"""

from typing import Any, Dict, List


HOSTAWAY_FALLBACK_REVIEWS: List[Dict[str, Any]] = [
    {
        "id": 7453,
        "type": "guest-to-host",
        "status": "published",
        "rating": None,
        "publicReview": "Shane and family are wonderful! Would definitely host again :)",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 10},
            {"category": "communication", "rating": 10},
            {"category": "respect_house_rules", "rating": 10},
        ],
        "submittedAt": "2020-08-21 22:45:14",
        "guestName": "Shane Finkelstein",
        "listingName": "2B N1 A - 29 Shoreditch Heights",
    },
    {
        "id": 7454,
        "type": "guest-to-host",
        "status": "published",
        "rating": 5,
        "publicReview": (
            "Amazing property in a fantastic location. Everything was clean and exactly "
            "as described. The host was very responsive and helpful throughout our stay."
        ),
        "reviewCategory": [
            {"category": "cleanliness", "rating": 5},
            {"category": "communication", "rating": 5},
            {"category": "location", "rating": 5},
            {"category": "value", "rating": 4},
        ],
        "submittedAt": "2024-08-15 14:30:22",
        "guestName": "Emily Rodriguez",
        "listingName": "1B S2 C - 15 Camden Lock Apartments",
    },
    {
        "id": 7455,
        "type": "guest-to-host",
        "status": "published",
        "rating": 4,
        "publicReview": (
            "Great stay overall. The apartment was modern and well-equipped. Only minor "
            "issue was noise from the street in the early morning, but that's expected "
            "in central London."
        ),
        "reviewCategory": [
            {"category": "cleanliness", "rating": 5},
            {"category": "communication", "rating": 4},
            {"category": "location", "rating": 5},
            {"category": "value", "rating": 4},
        ],
        "submittedAt": "2024-08-10 09:15:33",
        "guestName": "Marcus Thompson",
        "listingName": "Studio E1 B - 42 Canary Wharf Tower",
    },
    {
        "id": 7456,
        "type": "guest-to-host",
        "status": "published",
        "rating": 3,
        "publicReview": (
            "The location was perfect for our business trip, walking distance to "
            "everything we needed. However, the wifi was quite slow and the heating "
            "system was difficult to operate."
        ),
        "reviewCategory": [
            {"category": "cleanliness", "rating": 4},
            {"category": "communication", "rating": 3},
            {"category": "location", "rating": 5},
            {"category": "value", "rating": 3},
        ],
        "submittedAt": "2024-08-05 16:45:12",
        "guestName": "Sarah Chen",
        "listingName": "2B N1 A - 29 Shoreditch Heights",
    },
    {
        "id": 7457,
        "type": "guest-to-host",
        "status": "published",
        "rating": 5,
        "publicReview": (
            "Absolutely phenomenal experience! The property exceeded all expectations. "
            "Impeccably clean, beautifully designed, and the host went above and beyond "
            "to ensure our comfort. Will definitely book again!"
        ),
        "reviewCategory": [
            {"category": "cleanliness", "rating": 5},
            {"category": "communication", "rating": 5},
            {"category": "location", "rating": 5},
            {"category": "value", "rating": 5},
        ],
        "submittedAt": "2024-08-20 11:20:45",
        "guestName": "David Park",
        "listingName": "3B W1 D - 8 Kensington Gardens Mansion",
    },
    {
        "id": 7458,
        "type": "guest-to-host",
        "status": "published",
        "rating": 2,
        "publicReview": (
            "Unfortunately, our stay did not meet expectations. The property was not as "
            "clean as advertised and several amenities mentioned in the listing were not "
            "working. The host was slow to respond to our concerns."
        ),
        "reviewCategory": [
            {"category": "cleanliness", "rating": 2},
            {"category": "communication", "rating": 2},
            {"category": "location", "rating": 4},
            {"category": "value", "rating": 2},
        ],
        "submittedAt": "2024-07-28 13:35:18",
        "guestName": "Jennifer Walsh",
        "listingName": "1B S2 C - 15 Camden Lock Apartments",
    },
    {
        "id": 7459,
        "type": "guest-to-host",
        "status": "published",
        "rating": 4,
        "publicReview": (
            "Lovely property with great character. The exposed brick and high ceilings "
            "made it feel very special. Check-in was seamless and the location is "
            "unbeatable for exploring London."
        ),
        "reviewCategory": [
            {"category": "cleanliness", "rating": 4},
            {"category": "communication", "rating": 5},
            {"category": "location", "rating": 5},
            {"category": "value", "rating": 4},
        ],
        "submittedAt": "2024-08-12 19:22:56",
        "guestName": "Alessandro Rossi",
        "listingName": "Studio E1 B - 42 Canary Wharf Tower",
    },
    {
        "id": 7460,
        "type": "guest-to-host",
        "status": "published",
        "rating": 5,
        "publicReview": (
            "Perfect for our weekend getaway! The property was spotless, modern, and had "
            "everything we needed. Great local restaurants nearby and easy access to "
            "public transport."
        ),
        "reviewCategory": [
            {"category": "cleanliness", "rating": 5},
            {"category": "communication", "rating": 4},
            {"category": "location", "rating": 5},
            {"category": "value", "rating": 5},
        ],
        "submittedAt": "2024-08-18 08:45:30",
        "guestName": "Priya Sharma",
        "listingName": "2B N1 A - 29 Shoreditch Heights",
    },
]


GOOGLE_FALLBACK_REVIEWS: List[Dict[str, Any]] = [
    {
        "author_name": "Sarah Wilson",
        "rating": 5,
        "text": (
            "Excellent property management! The apartment was spotless and the check-in "
            "process was seamless. Location is perfect for exploring London."
        ),
        "time": 1723939200,  # 2024-08-18
        "relative_time_description": "a week ago",
    },
    {
        "author_name": "Michael Chen",
        "rating": 4,
        "text": (
            "Great stay overall. The property was well-maintained and the host was "
            "responsive. Only minor issue was the WiFi speed could be better."
        ),
        "time": 1723334400,  # 2024-08-11
        "relative_time_description": "2 weeks ago",
    },
    {
        "author_name": "Lisa Thompson",
        "rating": 5,
        "text": (
            "Amazing experience! The apartment exceeded our expectations. Perfect for "
            "business travel with excellent transport links."
        ),
        "time": 1722729600,  # 2024-08-04
        "relative_time_description": "3 weeks ago",
    },
]

# Display names used when the Google fallback stands in for a property
GOOGLE_FALLBACK_PROPERTY_NAMES: Dict[str, str] = {
    "2b-n1-a-29-shoreditch-heights": "29 Shoreditch Heights",
    "1b-s2-c-15-camden-lock-apartments": "15 Camden Lock Apartments",
    "2b-e1-b-42-canary-wharf-tower": "42 Canary Wharf Tower",
}
