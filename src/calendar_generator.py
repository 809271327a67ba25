import logging
from icalendar import Calendar, Event, Alarm
from datetime import timedelta
# Import the data models
from .data_models import ScrapeSuccess

logger = logging.getLogger(__name__)

DEFAULT_ICS_FILENAME = 'bin_collections.ics'
# 4.5 hours before midnight, i.e. 7:30 PM the day before
REMINDER_TRIGGER = timedelta(hours=-4.5)


def generate_calendar_object(result: ScrapeSuccess) -> Calendar:
    """
    Generates an icalendar.Calendar object with one all-day event per collection.
    """
    cal = Calendar()
    cal.add('prodid', '-//Bin Boy//RBWM//EN')
    cal.add('version', '2.0')

    logger.debug(f"Generating Calendar object for {len(result.collections)} collections from {result.source}")

    for collection in result.collections:
        bin_type = collection.bin_type.label
        event = Event()
        event.add('summary', f"{bin_type} collection")
        event.add('description', f"Bin collection day for: {bin_type}.\nSource: {result.source}")
        event.add('uid', f"{collection.date.isoformat()}-{bin_type.lower().replace(' ', '-')}@bin-boy")
        # All-Day Event
        event.add('dtstart', collection.date)
        # Mark as Free Time
        event.add('transp', 'TRANSPARENT')

        alarm = Alarm()
        alarm.add('action', 'DISPLAY')
        alarm.add('description', f"Put out {bin_type} tomorrow")
        alarm.add('trigger', REMINDER_TRIGGER)
        event.add_component(alarm)

        cal.add_component(event)

    return cal


def create_ics_file(result: ScrapeSuccess, filename: str = DEFAULT_ICS_FILENAME):
    """
    Generates and saves an .ics file for a successful scrape.
    """
    cal = generate_calendar_object(result)
    try:
        with open(filename, 'wb') as f:
            f.write(cal.to_ical())
        logger.info(f"Calendar file '{filename}' generated successfully.")
    except IOError as e:
        logger.error(f"Error writing ICS file {filename}: {e}", exc_info=True)
        raise
