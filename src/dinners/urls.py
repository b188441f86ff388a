DINNERS_PREFIX = "/dinners"

LIST_DINNERS_URL = "/"
DINNER_DETAILS_URL = "/details/{dinner_id}"
CREATE_DINNER_URL = "/create"
EDIT_DINNER_URL = "/edit/{dinner_id}"
DELETE_DINNER_URL = "/delete/{dinner_id}"
WEB_SLICE_POPULAR_URL = "/web-slice/popular"
WEB_SLICE_UPCOMING_URL = "/web-slice/upcoming"
