"""Slot names and small assertions shared by the composer tests."""

from src.timetable.grid import CellId

# Editable slots, in catalog order. 7:30am, 10:30am, 1:00pm and 5:00pm are special.
S0630 = "6:30am-7:30am"
S0800 = "8:00am-9:00am"
S0900 = "9:00am-10:30am"
S1100 = "11:00am-12:00pm"
S1200 = "12:00pm-1:00pm"
S1400 = "2:00pm-3:00pm"
S1500 = "3:00pm-4:00pm"
S1600 = "4:00pm-5:00pm"

MORNING_TEA = "7:30am-8:00am"
BREAK = "10:30am-11:00am"
LUNCH = "1:00pm-2:00pm"
PERSONAL_ADMIN = "5:00pm-7:00pm"


def cell(time_slot, class_id, day="MON"):
    return CellId(day, time_slot, class_id)


def fill(composer, content, cells, day="MON"):
    """Assign ``content`` to each (time_slot, class_id) pair in order."""
    for time_slot, class_id in cells:
        composer.assign(day, time_slot, class_id, content)
    composer.index.validate()
