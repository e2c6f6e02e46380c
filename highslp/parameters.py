"""
Parameters class for the HiGHS engine
"""

_SOLVERS = ('choose', 'simplex', 'ipm', 'pdlp')
_SWITCHES = ('choose', 'on', 'off')


class Parameters:
    """
    Engine options applied to a model before it runs.

    Attributes
    ----------
    output_flag : bool
        Let the engine write its own log (default: False)
    log_to_console : bool
        Send the engine log to the console (default: False)
    solver : str
        LP algorithm: 'choose', 'simplex', 'ipm' or 'pdlp' (default: 'choose')
    presolve : str
        'choose', 'on' or 'off' (default: 'choose')
    parallel : str
        'choose', 'on' or 'off' (default: 'choose')
    time_limit : float
        Maximum time in seconds (default: inf)
    mip_rel_gap : float
        Relative MIP gap tolerance (default: 1e-4)
    random_seed : int
        Engine random seed (default: 0)
    threads : int
        Worker threads; 0 lets the engine decide (default: 0)

    Examples
    --------
    >>> param = Parameters()
    >>> param.solver = 'ipm'
    >>> param.time_limit = 10.0
    """

    def __init__(self, **kwargs):
        self.output_flag = False
        self.log_to_console = False
        self.solver = 'choose'
        self.presolve = 'choose'
        self.parallel = 'choose'
        self.time_limit = float('inf')
        self.mip_rel_gap = 1e-4
        self.random_seed = 0
        self.threads = 0
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise TypeError(f"unknown parameter '{key}'")
            setattr(self, key, value)

    def __repr__(self):
        return (f"Parameters(solver={self.solver!r}, "
                f"presolve={self.presolve!r}, "
                f"time_limit={self.time_limit}, "
                f"mip_rel_gap={self.mip_rel_gap})")

    def validate(self):
        """Raise ValueError for option values the engine would reject"""
        if self.solver not in _SOLVERS:
            raise ValueError(f"solver must be one of {_SOLVERS}, got {self.solver!r}")
        for name in ('presolve', 'parallel'):
            if getattr(self, name) not in _SWITCHES:
                raise ValueError(f"{name} must be one of {_SWITCHES}, got {getattr(self, name)!r}")
        if self.time_limit <= 0:
            raise ValueError("time_limit must be positive")
        if self.mip_rel_gap < 0:
            raise ValueError("mip_rel_gap must be non-negative")
        if self.threads < 0:
            raise ValueError("threads must be non-negative")

    def to_options(self):
        """Engine option names mapped to typed values"""
        self.validate()
        options = {
            'output_flag': bool(self.output_flag),
            'log_to_console': bool(self.log_to_console),
            'solver': str(self.solver),
            'presolve': str(self.presolve),
            'parallel': str(self.parallel),
            'time_limit': float(self.time_limit),
            'mip_rel_gap': float(self.mip_rel_gap),
            'random_seed': int(self.random_seed),
        }
        # The engine fixes its thread pool on first run; only pass an explicit count
        if self.threads:
            options['threads'] = int(self.threads)
        return options

    @classmethod
    def from_dict(cls, d):
        """Create Parameters from dictionary; unknown keys are ignored"""
        param = cls()
        for key, value in d.items():
            if hasattr(param, key):
                setattr(param, key, value)
        return param

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'output_flag': self.output_flag,
            'log_to_console': self.log_to_console,
            'solver': self.solver,
            'presolve': self.presolve,
            'parallel': self.parallel,
            'time_limit': self.time_limit,
            'mip_rel_gap': self.mip_rel_gap,
            'random_seed': self.random_seed,
            'threads': self.threads,
        }
