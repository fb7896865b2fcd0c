#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)


####################################################################################################
#### WarningLimiter class
class WarningLimiter:
    """
    Count occurrences of one kind of warning and decide which occurrences are worth reporting.

    Periodic mode reports the first always_show occurrences, then every 100th up to 1000,
    every 1000th up to 10000, and so on. When max_reported is set, the first
    max_reported - 1 occurrences are reported, then a single suppression notice.
    """

    ####################################################################################################
    #### Constructor
    def __init__(self, always_show=10, max_reported=None, suppression_message=None, verbose=0):

        # Set verbosity
        if verbose is None:
            verbose = 0
        self.verbose = verbose

        self.always_show = always_show
        self.max_reported = max_reported
        self.suppression_message = suppression_message
        self.count = 0
        self.messages = []


    ####################################################################################################
    #### Record one occurrence. Returns the message to report, or None if this one is suppressed
    def record(self, message):

        self.count += 1

        if self.max_reported is not None:
            if self.count < self.max_reported:
                return self.store(message)
            if self.count == self.max_reported and self.suppression_message is not None:
                return self.store(self.suppression_message)
            return None

        if self.show_periodic(self.count):
            return self.store(message)
        return None


    ####################################################################################################
    def store(self, message):
        self.messages.append(message)
        if self.verbose >= 1:
            eprint(f"WARNING: {message}")
        return message


    ####################################################################################################
    def show_periodic(self, count):
        if count <= self.always_show:
            return True
        for ceiling, interval in [ (1000, 100), (10000, 1000), (100000, 10000), (1000000, 100000) ]:
            if count < ceiling:
                return count % interval == 0
        return False


####################################################################################################
#### BoundedMessageList class
class BoundedMessageList:
    """
    Collect per-row error messages up to a maximum number of entries and/or characters.
    """

    def __init__(self, max_messages=255, max_characters=None):
        self.max_messages = max_messages
        self.max_characters = max_characters
        self.messages = []
        self.n_characters = 0
        self.n_dropped = 0

    def append(self, message):
        if self.max_messages is not None and len(self.messages) >= self.max_messages:
            self.n_dropped += 1
            return False
        if self.max_characters is not None and self.n_characters >= self.max_characters:
            self.n_dropped += 1
            return False
        self.messages.append(message)
        self.n_characters += len(message) + 1
        return True

    def __len__(self):
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)

    def joined(self):
        return "\n".join(self.messages)
