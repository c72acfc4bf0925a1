from seating.models.table import Table, TableStatus
from seating.models.booking import Booking, BookingStatus
