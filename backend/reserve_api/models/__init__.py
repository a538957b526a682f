from .generated import Base, Booking, Restaurant, RestaurantConfig, metadata

__all__ = ["Base", "metadata", "Restaurant", "RestaurantConfig", "Booking"]
