from academy.schemas.common import APIResponse, TokenPayload
from academy.schemas.profiles import (
    ProfileBase,
    ProfileResponse,
    ProfileSummary,
    ProfileUpdate,
    ApproveMemberRequest,
    MemberClassesUpdate,
)
from academy.schemas.classes import (
    ClassCreate,
    ClassUpdate,
    ClassResponse,
)
from academy.schemas.enrollment import (
    EnrollmentApplicationCreate,
    EnrollmentApplicationResponse,
)
from academy.schemas.lms import (
    WorkbookCreate,
    WorkbookResponse,
    AssignmentCreate,
    AssignmentResponse,
    StudentTaskResponse,
    EvaluationRequest,
    TaskSubmissionResponse,
)
from academy.schemas.absences import (
    AbsenceReportCreate,
    AbsenceReportUpdate,
    AbsenceReportResponse,
)
from academy.schemas.work_logs import (
    WorkLogUpsert,
    WorkLogResponse,
)
from academy.schemas.payroll import (
    PayrollProfileUpsert,
    PayrollProfileResponse,
    PayrollRunRequest,
    PayrollRunResponse,
)
from academy.schemas.learning_journal import (
    PeriodCreate,
    PeriodResponse,
    EntryResponse,
    EntryDetailResponse,
)
from academy.schemas.equipment import (
    SlotResponse,
    RentalResponse,
)
from academy.schemas.notices import (
    NoticeCreate,
    NoticeResponse,
)
from academy.schemas.community import (
    CulturePickResponse,
    PhotoDiaryResponse,
    AtelierPostResponse,
)
