YTID = "ytid"
START_SECONDS = "start_seconds"
END_SECONDS = "end_seconds"
POSITIVE_LABELS = "positive_labels"
MANIFEST_COLUMNS = [YTID, START_SECONDS, END_SECONDS, POSITIVE_LABELS]

PATH = "path"
PATHS = "paths"
LABELS = "labels"
CLASSES = "classes"
SHA = "sha"
SHA256 = "sha256"
GIT = "git"
LOCAL = "local"
ENV = "env"
HOST = "host"
PLATFORM = "platform"
CREATED_AT = "created_at"
PARAMETERS = "parameters"
MANIFEST = "manifest"
SEED = "seed"

TRAINING = "training"
EVALUATION = "evaluation"
NUM_EVAL = "num_eval"
ITERATIONS = "iterations"
ITERATIONS_RUN = "iterations_run"
NUM_DROP = "num_drop"
INITIAL_NUM_DROP = "initial_num_drop"
N_SAMPLES = "n_samples"
HISTORY = "history"
