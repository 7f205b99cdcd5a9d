# blockfs

A small file system that lives inside a single disk image file. The disk is
1024 blocks of 128 bytes each. Block 0 is a bitmap of used blocks, block 1 is
the root directory, and every other block is a directory, an inode or a data
block.

Limits fixed by the on-disk format:

- file names are at most 9 bytes (UTF-8);
- a directory holds at most 10 entries;
- a file uses at most 60 data blocks, so it holds at most 7680 bytes.

## Installing

```
pip install .
```

## The shell

Run the interactive shell:

```
blockfs
```

The shell uses a disk image named `DISK` in the current working directory. It
is created and formatted on first use and reused afterwards. The prompt is
`FS> `; the shell stops on `quit` or at the end of input.

Run a script of commands instead, each line being echoed after the prompt:

```
blockfs -s commands.txt
```

A script stops at `quit`. Its last line is only run if it ends with a newline.

### Commands

| Command | Effect |
| --- | --- |
| `mkdir NAME` | make a directory |
| `cd NAME` | enter a directory in the current directory |
| `home` | go back to the root directory |
| `rmdir NAME` | remove an empty directory |
| `ls` | list the current directory; directories end with `/` |
| `create NAME` | create an empty data file |
| `append NAME DATA` | append DATA (a single word) to a file |
| `cat NAME` | print a file |
| `tail NAME N` | print the last N bytes of a file |
| `rm NAME` | delete a data file |
| `stat NAME` | show block and size information |
| `quit` | leave the shell |

Names refer to entries of the current directory only; there are no paths.
`N` for `tail` may be decimal, hexadecimal (`0x...`) or octal (leading `0`).

Messages about a bad command line (unknown command, wrong number of
arguments) go to standard error. Messages from the file system, such as
`File does not exist`, `File exists`, `Directory is full`,
`Directory is not empty` or `Disk is full`, go to standard output.

Example session:

```
FS> mkdir docs
FS> cd docs
FS> create note
FS> append note hello
FS> append note world
FS> cat note
helloworld
FS> tail note 5
world
FS> stat note
Inode block: 3
Bytes in file: 10
Number of blocks: 2
First block: 4
FS> quit
```

## Using it from Python

```python
from blockfs.filesys import FileSys

with FileSys("DISK") as fs:
    fs.mkdir("docs")
    fs.cd("docs")
    fs.create("note")
    fs.append("note", "hello")
    print(fs.cat("note"))       # b'hello'
    print(fs.tail("note", 3))   # b'llo'
    print(fs.ls())              # ['note']
    print(fs.stat("note"))      # a FileStat; stat of a directory gives a DirStat
```

`append` takes `str` or `bytes`; `cat` and `tail` return `bytes`. Failures such
as a missing file, a full directory or a full disk raise
`blockfs.filesys.FileSysError` with the same message the shell prints.

Lower layers are usable on their own:

- `blockfs.disk.Disk` reads and writes whole blocks of an image file and raises
  `DiskError` on misuse;
- `blockfs.basicfs.BasicFileSys` formats a new disk and allocates and frees
  blocks;
- `blockfs.blocks` holds the block layouts (`SuperBlock`, `DirBlock`,
  `DirEntry`, `Inode`) and the format constants.