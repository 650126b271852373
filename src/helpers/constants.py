SEED = 42

# audio files are matched as <ytid>_<start><suffix>, first suffix wins
AUDIO_EXTENSIONS = (".wav.gz", ".wav")
GZIP_SUFFIX = ".gz"

AUGMENT_MIN_LEN = 0.9
AUGMENT_MAX_LEN = 1.1
AUGMENT_NOISE = 0.005

DEFAULT_NUM_EVAL = 50
DEFAULT_ITERS = 10000
DEFAULT_TRAIN_OUT = "train.txt"
DEFAULT_EVAL_OUT = "eval.txt"

DEFAULT_NUM_CLASSES = 5
DEFAULT_NUM_STEPS = 50
DEFAULT_NUM_EPISODES = 1
