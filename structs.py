from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Optional, Union, Literal, Any, Annotated
from datetime import date

class Problem(BaseModel):
    model_config = ConfigDict(frozen=True)

    contestId: Optional[int] = None
    problemsetName: Optional[str] = None
    index: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    points: Optional[float] = None
    rating: Optional[int] = None
    tags: List[str] = []

class Party(BaseModel):
    model_config = ConfigDict(frozen=True)

    contestId: Optional[int] = None
    members: List[Dict[str, Any]] = []
    participantType: Optional[str] = None
    ghost: bool = False
    startTimeSeconds: Optional[int] = None

class Submission(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    contestId: Optional[int] = None
    creationTimeSeconds: int
    relativeTimeSeconds: Optional[int] = None
    problem: Problem
    author: Optional[Party] = None
    programmingLanguage: Optional[str] = None
    # absent while the submission is still being judged
    verdict: Optional[str] = None
    testset: Optional[str] = None
    passedTestCount: int = 0
    timeConsumedMillis: int = 0
    memoryConsumedBytes: int = 0

class RatingChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    contestId: int
    contestName: str
    handle: Optional[str] = None
    rank: int
    ratingUpdateTimeSeconds: int
    oldRating: int
    newRating: int

class User(BaseModel):
    handle: str
    rating: Optional[int] = None
    maxRating: Optional[int] = None
    rank: Optional[str] = None
    maxRank: Optional[str] = None
    contribution: int = 0
    friendOfCount: int = 0
    titlePhoto: Optional[str] = None
    avatar: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    organization: Optional[str] = None
    lastOnlineTimeSeconds: Optional[int] = None
    registrationTimeSeconds: Optional[int] = None

# Upstream envelope, resolved once at the client boundary
class ApiSuccess(BaseModel):
    status: Literal["OK"]
    result: Any = None

class ApiFailure(BaseModel):
    status: Literal["FAILED"]
    comment: Optional[str] = None

ApiResult = Annotated[Union[ApiSuccess, ApiFailure], Field(discriminator="status")]

class HandleCount(BaseModel):
    handle: str = Field(alias="_id")
    count: int

class VisitorStats(BaseModel):
    totalVisits: int = 0
    dailyVisits: int = 0
    weeklyVisits: int = 0
    monthlyVisits: int = 0
    uniqueVisitors: int = 0
    topSearchedHandles: List[HandleCount] = []
    topComparedHandles: List[HandleCount] = []

class SolvedCounts(BaseModel):
    total: int
    by_rating: Dict[int, int]
    by_tag: Dict[str, int]

class AggregatedStats(BaseModel):
    total_problems: int
    total_submissions: int
    # None means there is no data to aggregate
    max_rating: Optional[int] = None
    average_rating: Optional[int] = None
    acceptance_rate: Optional[int] = None
    total_contests: int
    recent_average: float
    problems_by_rating: Dict[int, int]
    problems_by_tags: Dict[str, int]

class ActivityPoint(BaseModel):
    day: date
    label: str
    submissions: int
    problems_solved: int

class DifficultyBucket(BaseModel):
    difficulty: int
    count: int

class VerdictCount(BaseModel):
    verdict: str
    count: int

class RatedSolve(BaseModel):
    day: date
    rating: int
    max_rating: Optional[int] = None

class ComparisonPoint(BaseModel):
    timestamp: int
    label: str
    contest_name: Optional[str] = None
    ratings: Dict[str, Optional[int]]

class HistogramRow(BaseModel):
    key: Union[int, str]
    counts: Dict[str, int]

class Profile(BaseModel):
    user: User
    submissions: List[Submission]
    rating_history: List[RatingChange]
    stats: AggregatedStats

class Comparison(BaseModel):
    first: Profile
    second: Profile
    rating_timeline: List[ComparisonPoint]
    rating_table: List[HistogramRow]
    tag_table: List[HistogramRow]
    rating_gap: Optional[int] = None
    extreme_mismatch: bool = False
