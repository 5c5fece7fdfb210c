from academy.core.database import Base
from academy.models.profiles import Profile, UserRole, ProfileStatus
from academy.models.classes import Class, ClassTeacher, ClassStudent
from academy.models.enrollment import EnrollmentApplication
from academy.models.lms import (
    Workbook,
    WorkbookItem,
    Assignment,
    AssignmentTarget,
    StudentTask,
    StudentTaskItem,
    TaskSubmission,
)
from academy.models.absences import AbsenceReport
from academy.models.payroll import (
    WorkLogEntry,
    TeacherPayrollProfile,
    TeacherPayrollRun,
    TeacherPayrollRunItem,
    TeacherPayrollAcknowledgement,
)
from academy.models.learning_journal import (
    LearningJournalPeriod,
    LearningJournalEntry,
    LearningJournalEntryLog,
    LearningJournalComment,
    ClassLearningJournalWeek,
    LearningJournalGreeting,
    LearningJournalAcademicEvent,
    LearningJournalAnnualSchedule,
)
from academy.models.equipment import EquipmentSlot, EquipmentRental
from academy.models.notices import (
    Notice,
    NoticeRecipient,
    NoticeAttachment,
    NoticeApplication,
)
from academy.models.community import (
    CulturePick,
    CulturePickReview,
    CulturePickReviewLike,
    CulturePickReviewComment,
    PhotoDiaryEntry,
    PhotoDiaryLike,
    PhotoDiaryComment,
    AtelierPost,
)
from academy.models.counseling import (
    CounselingSlot,
    CounselingReservation,
    CounselingQuestion,
)
from academy.models.timetables import (
    Timetable,
    TimetableTeacher,
    TimetablePeriod,
    TimetableAssignment,
)
from academy.models.materials import (
    ClassMaterialPost,
    ClassMaterialPrintRequest,
    ClassMaterialPrintRequestItem,
    AdmissionMaterialPost,
    AdmissionMaterialSchedule,
)
from academy.models.lectures import Lecture
from academy.models.film_notes import FilmNote, FilmNoteHistory
